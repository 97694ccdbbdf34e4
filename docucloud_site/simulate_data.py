"""Post simulated visitor traffic to a running server.

    python -m docucloud_site.simulate_data http://localhost:3000
"""

import random
import sys
import time
import uuid

import requests

# Simulation Parameters
NUM_USERS = 20
PAGES_PER_USER = 6
INQUIRY_RATE = 0.15
CTA_CLICK_RATE = 0.3

URL_PATHS = [
    "/",
    "/services",
    "/pricing",
    "/case-studies",
    "/about",
    "/contact",
]

REFERRERS = [
    "https://www.google.com/",
    "https://www.bing.com/",
    "https://www.linkedin.com/",
    "https://twitter.com/",
    None,
]

USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
]

SCREENS = [(1920, 1080), (1366, 768), (390, 844)]


def build_journey(base_url, rng=random):
    """Return the (path, payload) requests one simulated visitor would make."""
    session_id = f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
    screen = rng.choice(SCREENS)
    referrer = rng.choice(REFERRERS)
    steps = []

    for _ in range(rng.randint(1, PAGES_PER_USER)):
        url = base_url + rng.choice(URL_PATHS)
        steps.append(("/api/analytics/pageview", {
            "sessionId": session_id,
            "url": url,
            "title": "DocuCloud Solutions",
            "referrer": referrer,
            "screenWidth": screen[0],
            "screenHeight": screen[1],
            "viewportWidth": screen[0],
            "viewportHeight": screen[1] - 120,
        }))
        if rng.random() < CTA_CLICK_RATE:
            steps.append(("/api/analytics/event", {
                "sessionId": session_id,
                "name": "button_click",
                "category": "engagement",
                "label": "Get a Free Consultation",
                "pageUrl": url,
                "metadata": {"simulated": True},
            }))
        steps.append(("/api/analytics/time-spent", {
            "sessionId": session_id,
            "pageUrl": url,
            "timeSpent": rng.randint(3, 180),
        }))
        # Later pages are internal navigation
        referrer = url

    if rng.random() < INQUIRY_RATE:
        steps.append(("/api/inquiry", {
            "sessionId": session_id,
            "name": "Simulated Visitor",
            "email": f"visitor+{uuid.uuid4().hex[:8]}@example.com",
            "company": "Example Co",
            "message": "We'd like to automate our invoice processing.",
            "source": "simulation",
        }))
    return session_id, steps


def simulate_user_journey(server_url, http=requests):
    session_id, steps = build_journey(server_url)
    print(f"Simulating visitor: {session_id}")
    user_agent = random.choice(USER_AGENTS)

    for path, payload in steps:
        try:
            http.post(server_url + path, json=payload, headers={"User-Agent": user_agent}, timeout=10)
        except requests.RequestException as e:
            print(f"Error sending {path}: {e}")
        time.sleep(0.05)


if __name__ == "__main__":
    server_url = sys.argv[1].rstrip("/") if len(sys.argv) > 1 else "http://localhost:3000"
    print(f"Starting simulation of {NUM_USERS} visitors against {server_url}...")
    start_time = time.time()

    for _ in range(NUM_USERS):
        simulate_user_journey(server_url)

    print(f"Simulation complete in {time.time() - start_time:.2f}s")
