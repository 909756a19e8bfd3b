"""Outbound email delivery through the Resend REST API"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from productlobby_insights.config import EmailSettings

logger = logging.getLogger(__name__)

@dataclass
class EmailResult:
    success: bool
    error: Optional[str] = None

class EmailDeliveryError(Exception):
    """Raised when email delivery is not configured"""
    pass

def create_email_session() -> requests.Session:
    """Create a requests session with retry logic for the mail API"""
    session = requests.Session()

    retry_strategy = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["POST"],
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)

    return session

class EmailSender:
    """Sends HTML email; API failures come back as an unsuccessful EmailResult"""

    def __init__(self, email_settings: EmailSettings, session: Optional[requests.Session] = None):
        self.settings = email_settings
        self.session = session or create_email_session()

    def send_email(self, to: str, subject: str, html: str) -> EmailResult:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            EmailResult with ``error`` set when the API rejected the message

        Raises:
            EmailDeliveryError: If no API key is configured
        """
        if not self.settings.api_key:
            raise EmailDeliveryError("RESEND_API_KEY is not configured")

        payload = {
            "from": self.settings.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(
                self.settings.api_url,
                headers=headers,
                json=payload,
                timeout=30
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Email request to {to} failed: {e}")
            return EmailResult(success=False, error=f"Email request failed: {e}")

        if 200 <= response.status_code < 300:
            logger.info(f"Email sent to {to}. Status: {response.status_code}")
            return EmailResult(success=True)

        logger.error(f"Mail API returned {response.status_code}: {response.text}")
        return EmailResult(success=False, error=f"Mail API returned {response.status_code}")
