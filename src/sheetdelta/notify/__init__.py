"""Notification collaborators and the change report.

Exports
-------
EmailNotifier
    Sends the report over SMTP with CSV attachments.
WebhookNotifier
    POSTs the change set as JSON.
FanoutNotifier
    Delivers through several notifiers.
render_markdown / render_html
    Report rendering.
"""

from .email import EmailNotifier
from .fanout import FanoutNotifier
from .report import build_subject, render_html, render_markdown
from .webhook import WebhookNotifier

__all__ = [
    "EmailNotifier",
    "FanoutNotifier",
    "WebhookNotifier",
    "build_subject",
    "render_html",
    "render_markdown",
]
