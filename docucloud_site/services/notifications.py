"""Inquiry notification emails.

Notifications are best effort: every failure is logged here and never
reaches the request that created the inquiry.
"""

import logging
from html import escape

import requests

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
COMPANY_NAME = "DocuCloud Solutions"


def admin_subject(inquiry) -> str:
    subject = f"New Inquiry: {inquiry.name}"
    if inquiry.company:
        subject += f" from {inquiry.company}"
    return subject


def customer_subject(inquiry) -> str:
    return f"Thanks for reaching out to {COMPANY_NAME}!"


def _row(label, value):
    return f"""
        <tr style="border-bottom: 1px solid #e2e8f0;">
            <td style="padding: 10px; font-weight: bold; width: 30%;">{label}:</td>
            <td style="padding: 10px;">{value}</td>
        </tr>"""


def render_admin_email(inquiry) -> str:
    email = escape(inquiry.email)
    rows = _row("Name", escape(inquiry.name))
    rows += _row("Email", f'<a href="mailto:{email}" style="color: #2563eb;">{email}</a>')
    if inquiry.phone:
        phone = escape(inquiry.phone)
        rows += _row("Phone", f'<a href="tel:{phone}" style="color: #2563eb;">{phone}</a>')
    if inquiry.company:
        rows += _row("Company", escape(inquiry.company))
    rows += _row("Source", escape(inquiry.source or "website"))

    return f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background: linear-gradient(135deg, #2563eb, #1e40af); padding: 30px; text-align: center;">
            <h1 style="color: white; margin: 0;">New Inquiry Received</h1>
        </div>
        <div style="padding: 30px; background: #f8fafc;">
            <div style="background: white; padding: 20px; border-radius: 8px;">
                <h2 style="margin-top: 0; color: #1e293b;">Contact Information</h2>
                <table style="width: 100%; border-collapse: collapse;">{rows}
                </table>
            </div>
            <div style="background: white; padding: 20px; border-radius: 8px; margin-top: 20px;">
                <h3 style="margin-top: 0; color: #1e293b;">Message:</h3>
                <p style="color: #64748b; line-height: 1.6; white-space: pre-wrap;">{escape(inquiry.message)}</p>
            </div>
        </div>
        <div style="padding: 20px; text-align: center; color: #64748b; font-size: 12px;">
            <p>{COMPANY_NAME} | Automated Inquiry Notification</p>
        </div>
    </body>
    </html>
    """


def render_customer_email(inquiry) -> str:
    first_name = escape(inquiry.name.split(" ")[0])

    return f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background: linear-gradient(135deg, #2563eb, #1e40af); padding: 30px; text-align: center;">
            <h1 style="color: white; margin: 0;">Thank You, {first_name}!</h1>
        </div>
        <div style="padding: 30px; background: #f8fafc;">
            <p style="font-size: 16px; line-height: 1.6; color: #475569;">
                We received your inquiry and appreciate you reaching out to {COMPANY_NAME}.
            </p>
            <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0;">
                <h3 style="color: #1e293b; margin-top: 0;">What happens next?</h3>
                <ul style="color: #64748b; line-height: 1.8;">
                    <li>We'll review your inquiry within the next few hours</li>
                    <li>A team member will contact you within 24 hours</li>
                    <li>We'll schedule your free 15-minute automation consultation</li>
                    <li>You'll receive a customized automation strategy</li>
                </ul>
            </div>
            <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e2e8f0;">
                <p style="color: #64748b; font-size: 14px;">
                    Best regards,<br>
                    <strong style="color: #1e293b;">The {COMPANY_NAME} Team</strong>
                </p>
            </div>
        </div>
        <div style="padding: 20px; text-align: center; color: #64748b; font-size: 12px;">
            <p>{COMPANY_NAME} LLC<br>
            <a href="https://docucloudsolutions.com" style="color: #2563eb;">docucloudsolutions.com</a></p>
        </div>
    </body>
    </html>
    """


class Notifier:
    """Sends the two inquiry emails through ``send_email``.

    Subclasses implement ``send_email(to, subject, html)`` and raise on
    failure.
    """

    def __init__(self, from_email: str, notification_email: str):
        self.from_email = from_email
        self.notification_email = notification_email

    def send_email(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError

    def send_admin_notification(self, inquiry) -> None:
        self.send_email(self.notification_email, admin_subject(inquiry), render_admin_email(inquiry))
        logger.info("Admin notification sent for inquiry %s", inquiry.id)

    def send_customer_confirmation(self, inquiry) -> None:
        self.send_email(inquiry.email, customer_subject(inquiry), render_customer_email(inquiry))
        logger.info("Confirmation sent to %s", inquiry.email)

    def send_inquiry_notifications(self, inquiry) -> bool:
        """Send both emails; returns True only if both went out."""
        delivered = True
        for send in (self.send_admin_notification, self.send_customer_confirmation):
            try:
                send(inquiry)
            except Exception:
                delivered = False
                logger.exception("Email notification error for inquiry %s", inquiry.id)
        return delivered


class SendGridNotifier(Notifier):
    def __init__(self, api_key: str, from_email: str, notification_email: str, timeout: float = 30):
        super().__init__(from_email, notification_email)
        self.api_key = api_key
        self.timeout = timeout

    def send_email(self, to: str, subject: str, html: str) -> None:
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email, "name": COMPANY_NAME},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        response = requests.post(
            SENDGRID_SEND_URL,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        response.raise_for_status()


class LogNotifier(Notifier):
    """Development notifier: logs what would have been sent."""

    def send_email(self, to: str, subject: str, html: str) -> None:
        logger.info("Email (not sent, no SENDGRID_API_KEY): to=%s subject=%r", to, subject)


def build_notifier(settings) -> Notifier:
    if settings.sendgrid_api_key:
        return SendGridNotifier(
            settings.sendgrid_api_key, settings.from_email, settings.notification_email
        )
    logger.warning("SENDGRID_API_KEY not set; inquiry emails will only be logged")
    return LogNotifier(settings.from_email, settings.notification_email)
