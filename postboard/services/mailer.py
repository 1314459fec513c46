"""Email service for password setup notifications."""

import html
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from urllib.parse import quote

from postboard.config import Settings

logger = logging.getLogger(__name__)

PASSWORD_SETUP_SUBJECT = "Set Up Your Postboard Account Password"


class EmailService:
    """Sends transactional email over SMTP, one synchronous attempt per message."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def password_setup_url(self, token: str) -> str:
        base_url = self.settings.frontend_base_url.rstrip("/")
        return f"{base_url}/set-password?token={quote(token, safe='')}"

    def build_password_setup_message(self, email: str, username: str, token: str) -> EmailMessage:
        """Compose the password setup email."""
        setup_url = self.password_setup_url(token)
        ttl = self.settings.reset_token_ttl_hours

        msg = EmailMessage()
        msg["From"] = formataddr((self.settings.mail_from_name, self.settings.mail_from_address))
        msg["To"] = email
        msg["Subject"] = PASSWORD_SETUP_SUBJECT
        msg.set_content(
            f"Welcome to Postboard, {username}!\n\n"
            f"Set up your password here: {setup_url}\n\n"
            f"This link will expire in {ttl} hours.\n"
        )
        msg.add_alternative(
            f"""<html>
<body>
    <h2>Welcome to Postboard, {html.escape(username)}!</h2>
    <p>Your account has been created. Please set up your password by clicking the link below:</p>
    <p><a href="{html.escape(setup_url)}">Set Your Password</a></p>
    <p>This link will expire in {ttl} hours.</p>
    <p>If you didn't request this account, please ignore this email.</p>
</body>
</html>""",
            subtype="html",
        )
        return msg

    def send_password_setup_email(self, email: str, username: str, token: str) -> None:
        """Send the password setup email. Raises on any delivery failure."""
        if not self.settings.smtp_host:
            raise RuntimeError("SMTP host is not configured")

        msg = self.build_password_setup_message(email, username, token)
        logger.info(f"Sending password setup email to {email}")
        try:
            self._send(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send password setup email to {email}: {e}")
            raise
        logger.info(f"Password setup email sent to {email}")

    def _send(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(
            self.settings.smtp_host,
            self.settings.smtp_port,
            timeout=self.settings.smtp_timeout_seconds,
        ) as server:
            if self.settings.smtp_use_tls:
                server.starttls()
            if self.settings.smtp_username and self.settings.smtp_password:
                server.login(self.settings.smtp_username, self.settings.smtp_password)
            server.send_message(msg)
