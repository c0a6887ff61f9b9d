"""Email service — delivers one-time codes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from sodipas_api.config import Settings, settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails using the configured SMTP server.

    Without an SMTP host the message is only written to the log, which is
    how the demo deployment surfaces codes on the console.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or settings

    async def send_otp(self, to_email: str, user_name: str, code: str) -> None:
        """Deliver a login code.

        Parameters
        ----------
        to_email:
            Recipient email address.
        user_name:
            Name of the user (used in the greeting).
        code:
            The 6-digit one-time code.
        """
        cfg = self._config
        if not cfg.smtp_host:
            logger.info("📧 OTP for %s: %s  (SMTP not configured)", to_email, code)
            return

        msg = EmailMessage()
        msg["Subject"] = f"Your {cfg.app_name} login code"
        msg["From"] = cfg.email_from
        msg["To"] = to_email
        msg.set_content(
            f"Hello {user_name},\n\n"
            f"Your login code is {code}. It expires in {cfg.otp_ttl_minutes} minutes.\n\n"
            "If you did not try to sign in, please contact your administrator.\n\n"
            f"The {cfg.app_name} Team"
        )

        logger.info("Sending login code to %s", to_email)
        try:
            await aiosmtplib.send(
                msg,
                hostname=cfg.smtp_host,
                port=cfg.smtp_port,
                username=cfg.smtp_username or None,
                password=cfg.smtp_password or None,
                start_tls=True,
            )
        except aiosmtplib.SMTPException as exc:
            logger.exception("Login code delivery to %s failed: %s", to_email, exc)
            return

        logger.info("Login code sent to %s", to_email)
