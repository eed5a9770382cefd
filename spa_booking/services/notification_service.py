import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

import requests

from spa_booking.core.config import Settings
from spa_booking.core.errors import NotificationError
from spa_booking.core.logger import logger
from spa_booking.models.booking_models import NormalizedBooking

GRAPH_API_URL = "https://graph.facebook.com/{version}/{phone_number_id}/messages"


def format_booking_summary(booking: NormalizedBooking) -> str:
    """Single text block used as the WhatsApp template parameter."""
    return (
        f"👤 Name: {booking.firstName}\n"
        f"📞 Phone: {booking.phone}\n"
        f"🛠 Service: {booking.service}\n"
        f"📅 Date & Time: {booking.date} {booking.time}\n"
        f"💬 Message: {booking.message or 'No message'}"
    )


class Notifier:
    """
    The two outbound channels: an email to the spa owner and a WhatsApp
    template message. Both raise NotificationError on failure; deciding
    whether that matters is up to the caller.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def send_generic(self, booking: NormalizedBooking, to_email: Optional[str] = None) -> None:
        """
        Email the booking to the admin over SMTP.
        Defaults `to_email` to ADMIN_EMAIL.
        """
        s = self.settings
        to_email = to_email or s.ADMIN_EMAIL
        if not to_email:
            raise NotificationError(detail="No recipient email (ADMIN_EMAIL missing)")
        if not s.SMTP_USERNAME or not s.SMTP_PASSWORD:
            raise NotificationError(detail="SMTP credentials missing")

        subject = f"New booking: {booking.firstName} - {booking.service}"
        body = (
            "A new appointment request was submitted.\n\n"
            f"Name: {booking.firstName}\n"
            f"Email: {booking.email}\n"
            f"Phone: {booking.phone}\n"
            f"Service: {booking.service}\n"
            f"Date: {booking.date}\n"
            f"Time: {booking.time}\n"
            f"Message: {booking.message or '-'}\n\n"
            f"Submitted at {booking.timestamp}"
        )

        msg = MIMEMultipart()
        msg['From'] = s.SMTP_USERNAME
        msg['To'] = to_email
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'plain'))

        try:
            server = smtplib.SMTP(s.SMTP_SERVER, s.SMTP_PORT, timeout=10)
            try:
                server.starttls()
                server.login(s.SMTP_USERNAME, s.SMTP_PASSWORD)
                server.sendmail(s.SMTP_USERNAME, to_email, msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(detail=f"SMTP error: {e}")

        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")

    def send_templated(self, to: str, template_name: str, params: List[str]) -> dict:
        """
        Send an approved WhatsApp template through the Meta Cloud API.
        Returns the API response body.
        """
        s = self.settings
        if not s.META_WA_TOKEN or not s.META_WA_PHONE_NUMBER_ID:
            raise NotificationError(detail="Missing WhatsApp API credentials")
        if not to:
            raise NotificationError(detail="No WhatsApp recipient configured")

        url = GRAPH_API_URL.format(version=s.META_WA_API_VERSION, phone_number_id=s.META_WA_PHONE_NUMBER_ID)
        headers = {
            "Authorization": f"Bearer {s.META_WA_TOKEN}",
            "Content-Type": "application/json"
        }
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "template",
            "template": {
                "name": template_name,
                "language": {"code": s.WA_LANGUAGE_CODE},
                "components": [
                    {
                        "type": "body",
                        "parameters": [{"type": "text", "text": str(value)} for value in params],
                    }
                ],
            },
        }

        logger.info(f"📤 Sending WhatsApp template '{template_name}' to {to}...")
        try:
            response = requests.post(url, json=payload, headers=headers, timeout=10)
        except requests.RequestException as e:
            raise NotificationError(detail=f"WhatsApp request failed: {e}")

        if response.status_code not in (200, 201):
            raise NotificationError(detail=f"WhatsApp API Error {response.status_code}: {response.text}")

        logger.info(f"✅ WhatsApp message sent to {to}.")
        return response.json()
