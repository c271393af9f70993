from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

logger = logging.getLogger(__name__)


def send_itinerary_email(
    html_body: str,
    text_body: str,
    subject: str,
    to_addr: str,
    *,
    smtp_host: str,
    mail_from: str,
    smtp_user: str = "",
    smtp_pass: str = "",
    port: int = 465,
    use_tls: bool = False,
    timeout: float = 20,
) -> None:
    """Send the itinerary to ``to_addr``.

    ``smtp_user``/``smtp_pass`` are optional (relays without auth). Set
    ``use_tls`` to ``True`` for a ``STARTTLS`` connection, otherwise SMTPS is
    used on ``port``. Errors from :mod:`smtplib` propagate to the caller,
    as does ``ValueError`` for header values with line breaks.
    """
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = mail_from
    msg["To"] = to_addr

    msg.set_content(text_body or " ")
    msg.add_alternative(f"<html><body>{html_body}</body></html>", subtype="html")

    ctx = ssl.create_default_context()
    if use_tls:
        with smtplib.SMTP(smtp_host, port, timeout=timeout) as smtp:
            smtp.starttls(context=ctx)
            if smtp_user:
                smtp.login(smtp_user, smtp_pass)
            smtp.send_message(msg)
    else:
        with smtplib.SMTP_SSL(smtp_host, port, timeout=timeout, context=ctx) as smtp:
            if smtp_user:
                smtp.login(smtp_user, smtp_pass)
            smtp.send_message(msg)
    logger.info("Itinerary e-mail sent to %s", to_addr)


__all__ = ["send_itinerary_email"]
