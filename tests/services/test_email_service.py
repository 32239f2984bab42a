"""
Tests for the EmailService.
"""

import pytest
import smtplib
from unittest.mock import MagicMock

from src.tuition_track.common.config import settings
from src.tuition_track.common.exceptions import PersistenceError
from src.tuition_track.services.email_service import EmailService


@pytest.mark.anyio
class TestEmailService:
    """Test suite for the EmailService."""

    @pytest.fixture
    def email_service(self) -> EmailService:
        return EmailService()

    @pytest.fixture
    def smtp_settings(self, mocker):
        mocker.patch.object(settings, "SMTP_HOST", "smtp.tuitiontrack.test")
        mocker.patch.object(settings, "SMTP_PORT", 587)
        mocker.patch.object(settings, "SMTP_USE_TLS", True)
        mocker.patch.object(settings, "SMTP_USERNAME", "mailer")
        mocker.patch.object(settings, "SMTP_PASSWORD", "mailer-password")

    async def test_without_smtp_host_only_logs(self, email_service: EmailService, mocker):
        mock_smtp = mocker.patch("smtplib.SMTP")

        await email_service.send_verification_code("pupil@tuitiontrack.com", "Pat", "123456")

        mock_smtp.assert_not_called()

    async def test_sends_code(self, email_service: EmailService, smtp_settings, mocker):
        print("\n--- Testing EmailService SMTP delivery ---")
        # 1. ARRANGE
        mock_smtp = mocker.patch("smtplib.SMTP")
        server = mock_smtp.return_value.__enter__.return_value

        # 2. ACT
        await email_service.send_verification_code("pupil@tuitiontrack.com", "Pat", "123456")

        # 3. ASSERT
        mock_smtp.assert_called_once_with("smtp.tuitiontrack.test", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mailer-password")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "pupil@tuitiontrack.com"
        assert "123456" in message.get_content()

    async def test_smtp_failure(self, email_service: EmailService, smtp_settings, mocker):
        mock_smtp = mocker.patch("smtplib.SMTP")
        server = MagicMock()
        server.send_message.side_effect = smtplib.SMTPException("mailbox unavailable")
        mock_smtp.return_value.__enter__.return_value = server

        with pytest.raises(PersistenceError) as e:
            await email_service.send_verification_code("pupil@tuitiontrack.com", "Pat", "123456")
        assert e.value.status_code == 500
