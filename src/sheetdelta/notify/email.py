"""E-mail notifier over SMTP."""

from __future__ import annotations

import smtplib
from collections.abc import Callable
from email.message import EmailMessage
from pathlib import Path

from sheetdelta.errors import NotifyError
from sheetdelta.models import ChangeNotification
from sheetdelta.observability import get_logger

from .report import build_subject, render_html, render_markdown

log = get_logger("sheetdelta.notify")


class EmailNotifier:
    """Send the change report as a multipart e-mail.

    The message carries the Markdown report as plain text, an HTML
    alternative, and every attachment of the notification.

    Parameters
    ----------
    host, port:
        SMTP server (``smtp.gmail.com``, 587 for a Gmail app password).
    sender:
        ``From`` address.
    recipients:
        ``To`` addresses.
    username, password:
        SMTP credentials; login is skipped when *username* is empty.
        The password is never logged.
    use_tls:
        Upgrade the connection with STARTTLS before logging in.
    timeout_seconds:
        Socket timeout for the whole SMTP exchange.
    smtp_factory:
        Constructor for the SMTP connection, ``smtplib.SMTP`` by default.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        *,
        sender: str,
        recipients: list[str],
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout_seconds: float = 30.0,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        if not recipients:
            raise ValueError("EmailNotifier needs at least one recipient")
        self._host = host
        self._port = port
        self._sender = sender
        self._recipients = list(recipients)
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout_seconds
        self._smtp_factory = smtp_factory

    def __repr__(self) -> str:
        return (
            f"EmailNotifier(host={self._host!r}, port={self._port!r}, "
            f"sender={self._sender!r}, recipients={self._recipients!r}, "
            f"username={self._username!r}, password='****')"
        )

    def build_message(self, notification: ChangeNotification) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = build_subject(notification)
        message["From"] = self._sender
        message["To"] = ", ".join(self._recipients)
        message.set_content(render_markdown(notification))
        message.add_alternative(render_html(notification), subtype="html")

        for attachment in notification.attachments:
            maintype, _, subtype = attachment.mime_type.partition("/")
            message.add_attachment(
                Path(attachment.path).read_bytes(),
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return message

    def notify(self, notification: ChangeNotification) -> bool:
        """Send the report; raise :class:`NotifyError` if SMTP fails."""
        try:
            message = self.build_message(notification)
            with self._smtp_factory(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotifyError(
                message=f"E-mail delivery via {self._host}:{self._port} failed: {exc}",
                context={"notifier": "email", "host": self._host, "port": self._port},
                cause=exc,
            ) from exc

        log.info(
            "Change report e-mailed",
            extra={"extra_fields": {
                "op": "notify",
                "recipients": len(self._recipients),
                "attachments": len(notification.attachments),
            }},
        )
        return True
