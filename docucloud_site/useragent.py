"""User-agent classification.

``parse_user_agent`` maps a raw User-Agent header onto the three labels kept
on a visitor session. Parsing is delegated to the ``user-agents`` package
(the ua-parser regex tables); the device rule applied on top of the parsed
device family is:

    ==========================  ===========
    parsed device family        device_type
    ==========================  ===========
    ``iPhone`` / ``iPad``       mobile
    anything but ``Other``      mobile
    ``Other``                   desktop
    ==========================  ===========

The second row also catches recognised desktop families (``Mac`` for
example). That is how sessions have always been classified, so reports stay
comparable; see DESIGN.md before changing it.
"""

from typing import NamedTuple

from user_agents import parse

MOBILE_FAMILIES = ("iPhone", "iPad")
GENERIC_FAMILY = "Other"


class ClientInfo(NamedTuple):
    device_type: str
    browser: str
    os: str


def device_type_for(device_family: str) -> str:
    if device_family in MOBILE_FAMILIES:
        return "mobile"
    if device_family != GENERIC_FAMILY:
        return "mobile"
    return "desktop"


def _label(family: str, version: str) -> str:
    return f"{family} {version}" if version else family


def parse_user_agent(ua_string) -> ClientInfo:
    ua = parse(ua_string or "")
    return ClientInfo(
        device_type=device_type_for(ua.device.family),
        browser=_label(ua.browser.family, ua.browser.version_string),
        os=_label(ua.os.family, ua.os.version_string),
    )
