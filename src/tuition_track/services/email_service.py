'''
Delivers verification codes by email.
When no SMTP host is configured the code is written to the application log.
'''
import asyncio
import smtplib
from email.message import EmailMessage

from ..common.config import settings
from ..common.logger import log
from ..common.exceptions import PersistenceError


class EmailService:
    """
    Thin wrapper around smtplib. Sending happens in a worker thread so the
    event loop is never blocked on the SMTP conversation.
    """

    async def send_verification_code(self, to_email: str, name: str, code: str):
        if not settings.SMTP_HOST:
            log.info(
                f"SMTP not configured. Verification code for {name} <{to_email}>: {code} "
                f"(valid for {settings.OTP_EXPIRE_MINUTES} minutes)"
            )
            return

        message = self._build_verification_message(to_email, name, code)
        try:
            await asyncio.to_thread(self._send, message)
            log.info(f"Verification email sent to {to_email}.")
        except (smtplib.SMTPException, OSError) as e:
            log.error(f"Failed to send verification email to {to_email}: {e}", exc_info=True)
            raise PersistenceError("Failed to send verification email")

    def _build_verification_message(self, to_email: str, name: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = "Your TuitionTrack verification code"
        message["From"] = settings.FROM_EMAIL
        message["To"] = to_email
        message.set_content(
            f"Hello {name},\n\n"
            f"Your verification code is {code}.\n"
            f"It expires in {settings.OTP_EXPIRE_MINUTES} minutes.\n\n"
            "If you did not create a TuitionTrack account you can ignore this email.\n"
        )
        return message

    def _send(self, message: EmailMessage):
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
            if settings.SMTP_USE_TLS:
                server.starttls()
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(message)
