from __future__ import annotations

import mimetypes
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from typing import Sequence

from vnjp_cms.config import Config


def _debug(msg: str) -> None:
    print(f"[mail] {msg}")


@dataclass(frozen=True)
class Attachment:
    filename: str
    path: str


class SmtpMailer:
    """Send HTML mail through the configured SMTP account (Gmail by default)."""

    def __init__(self, cfg: Config):
        self.cfg = cfg

    @property
    def sender(self) -> str:
        return str(self.cfg.AUTH_EMAIL or "")

    def send(self, to: str, subject: str, html: str, attachments: Sequence[Attachment] = ()) -> None:
        if not self.cfg.MAIL_ENABLED:
            _debug(f"Mail disabled; skipped subject={subject!r} to={to}")
            return
        if not self.cfg.AUTH_EMAIL or not self.cfg.AUTH_PASSWORD:
            raise RuntimeError("AUTH_EMAIL / AUTH_PASSWORD are not configured")
        if not to:
            raise RuntimeError("mail recipient is blank")

        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        for att in attachments:
            ctype, _ = mimetypes.guess_type(att.filename)
            maintype, subtype = (ctype or "application/octet-stream").split("/", 1)
            msg.add_attachment(
                Path(att.path).read_bytes(),
                maintype=maintype,
                subtype=subtype,
                filename=att.filename,
            )

        _debug(f"Sending subject={subject!r} to={to} attachments={len(attachments)}")
        with smtplib.SMTP_SSL(self.cfg.SMTP_HOST, int(self.cfg.SMTP_PORT), timeout=30) as smtp:
            smtp.login(self.cfg.AUTH_EMAIL, self.cfg.AUTH_PASSWORD)
            smtp.send_message(msg)


def verification_email_html(link: str) -> str:
    return (
        "<p>Verify your email address to complete the signup and login into your account</p>"
        "<p>This link <b>expires in 6 hours</b>.</p>"
        f'<p>Press <a href="{link}">here</a> to procced</p>'
    )


def reset_email_html(link: str) -> str:
    return (
        "<p>We heard that your lost the password.</p>"
        "<p>Don't worry, use the link below to reset it.</p>"
        "<p>This link <b>expires in 60 minutes</b>.</p>"
        f'<p>Press <a href="{link}">here</a> to procced.</p>'
    )
