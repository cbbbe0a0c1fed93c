from __future__ import annotations

import logging
import smtplib
import threading
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> None:
        raise NotImplementedError

    def send_async(self, *, to: str, subject: str, html: str) -> None:
        """Fire-and-forget: failures are logged, never raised to the caller."""
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    sender: str = "no-reply@hrhub.com"
    use_tls: bool = True


class SmtpEmailSender(EmailSender):
    """SMTP delivery. With an empty host the message is only logged (dev setups)."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def send(self, *, to: str, subject: str, html: str) -> None:
        if not self._settings.host:
            logger.info("SMTP not configured, email to %s not sent (subject=%r)", to, subject)
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._settings.sender
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP(self._settings.host, int(self._settings.port), timeout=15) as server:
            if self._settings.use_tls:
                server.starttls()
            if self._settings.user:
                server.login(self._settings.user, self._settings.password)
            server.sendmail(self._settings.sender, [to], msg.as_string())
        logger.info("Email sent to %s (subject=%r)", to, subject)

    def _deliver_logged(self, to: str, subject: str, html: str) -> None:
        # runs on a daemon thread, nothing above it sees the error
        try:
            self.send(to=to, subject=subject, html=html)
        except Exception:
            logger.exception("Failed to send email to %s (subject=%r)", to, subject)

    def send_async(self, *, to: str, subject: str, html: str) -> None:
        threading.Thread(target=self._deliver_logged, args=(to, subject, html), daemon=True).start()


def welcome_email(*, name: str, email: str, employee_code: str, temp_password: str, website_url: str) -> str:
    return f"""
    <h2>Welcome to HR Hub, {name}!</h2>
    <p>Your account has been created.</p>
    <ul>
      <li>Employee ID: <b>{employee_code}</b></li>
      <li>Login email: <b>{email}</b></li>
      <li>Temporary password: <b>{temp_password}</b></li>
    </ul>
    <p>Sign in at <a href="{website_url}">{website_url}</a> and choose a new password.</p>
    """


def password_reset_email(*, name: str, otp: str, valid_minutes: int) -> str:
    return f"""
    <h2>Password Reset Request</h2>
    <p>Hello {name},</p>
    <p>Use this code to reset your password: <b style="font-size:24px">{otp}</b></p>
    <p>The code is valid for {valid_minutes} minutes. If you did not request it, ignore this email.</p>
    """
