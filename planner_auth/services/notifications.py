"""Activation and password-reset emails, delivered off the request path.

Requests only enqueue a message; delivery runs on a small worker pool.
A failed delivery is logged and dropped: it is never retried and never
reported to the user whose request triggered it.
"""

import logging
import smtplib
import ssl
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from planner_auth.core.config import Settings

logger = logging.getLogger(__name__)

ACTIVATION_SUBJECT = "Account activation required"

ACTIVATION_TEXT = """Hello {username},

You created an account for the Planner web application.

Open the link below to confirm your registration:
{activation_link}
"""

ACTIVATION_HTML = """<p>Hello {username},</p>
<p>You created an account for the Planner web application.</p>
<p><a href="{activation_link}">Confirm your registration</a></p>
"""

RESET_PASSWORD_SUBJECT = "Password reset"

RESET_PASSWORD_TEXT = """Hello,

Someone requested a password reset for your Planner account.
If it was not you, delete this email.

Open the link below to set a new password (valid for {minutes} minutes):
{reset_link}
"""

RESET_PASSWORD_HTML = """<p>Hello,</p>
<p>Someone requested a password reset for your Planner account.
If it was not you, delete this email.</p>
<p><a href="{reset_link}">Reset password</a> (valid for {minutes} minutes)</p>
"""


class Notifier(Protocol):
    """Fire-and-forget delivery of account emails."""

    def send_activation_email(self, email: str, username: str, activation_token: str) -> None: ...

    def send_reset_password_email(self, email: str, reset_token: str) -> None: ...


class NotificationDispatcher:
    """Runs delivery jobs on a worker pool and logs their failures."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )

    def submit(self, job_name: str, fn: Callable[..., None], *args: object) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._log_outcome(job_name, f))
        return future

    @staticmethod
    def _log_outcome(job_name: str, future: Future) -> None:
        if future.cancelled():
            logger.warning("Notification %s cancelled", job_name)
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Notification %s failed: %s", job_name, exc)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class EmailNotifier:
    """Notifier that sends multipart emails over SMTP from the dispatcher's workers."""

    def __init__(self, settings: Settings, dispatcher: NotificationDispatcher) -> None:
        self._settings = settings
        self._dispatcher = dispatcher

    def send_activation_email(self, email: str, username: str, activation_token: str) -> None:
        link = f"{self._settings.CLIENT_URL}/activate-account/{activation_token}"
        message = self._create_message(
            to_email=email,
            subject=ACTIVATION_SUBJECT,
            text_body=ACTIVATION_TEXT.format(username=username, activation_link=link),
            html_body=ACTIVATION_HTML.format(username=username, activation_link=link),
        )
        self._dispatcher.submit("activation", self._send_email, email, message)

    def send_reset_password_email(self, email: str, reset_token: str) -> None:
        link = f"{self._settings.CLIENT_URL}/update-password/{reset_token}"
        minutes = self._settings.JWT_RESET_TOKEN_EXPIRE_MINUTES
        message = self._create_message(
            to_email=email,
            subject=RESET_PASSWORD_SUBJECT,
            text_body=RESET_PASSWORD_TEXT.format(reset_link=link, minutes=minutes),
            html_body=RESET_PASSWORD_HTML.format(reset_link=link, minutes=minutes),
        )
        self._dispatcher.submit("reset-password", self._send_email, email, message)

    def _create_message(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self._settings.EMAIL_FROM_NAME} <{self._settings.EMAIL_FROM}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _send_email(self, to_email: str, message: MIMEMultipart) -> None:
        s = self._settings
        if not s.SMTP_ENABLED:
            logger.warning("SMTP disabled, email '%s' not sent to %s", message["Subject"], to_email)
            return
        if not s.SMTP_HOST:
            logger.error("SMTP host not configured")
            return

        password = s.SMTP_PASSWORD.get_secret_value() if s.SMTP_PASSWORD else ""

        if s.SMTP_USE_TLS and not s.SMTP_STARTTLS:
            # Implicit TLS (port 465)
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(
                s.SMTP_HOST, s.SMTP_PORT, context=context, timeout=s.SMTP_TIMEOUT_SEC
            ) as server:
                if s.SMTP_USER:
                    server.login(s.SMTP_USER, password)
                server.send_message(message)
        else:
            # STARTTLS (port 587) or plain
            with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as server:
                if s.SMTP_STARTTLS:
                    server.starttls(context=ssl.create_default_context())
                if s.SMTP_USER:
                    server.login(s.SMTP_USER, password)
                server.send_message(message)

        logger.info("Email '%s' sent to %s", message["Subject"], to_email)
