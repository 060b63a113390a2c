# core/notifications.py
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional

from core.config import settings
from core.logging_config import logger


def smtp_configured() -> bool:
    return all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS])


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def send_email(
    subject: str,
    body: str,
    recipients: List[str],
    html_body: Optional[str] = None,
) -> bool:
    """
    Send email via SMTP over SSL.

    Returns False (and logs) when SMTP is not configured, so local
    development works with links taken from the log. Raises on SMTP failure.
    """
    if not recipients:
        logger.warning("No recipients specified — skipping email.")
        return False

    if not smtp_configured():
        logger.warning("Email credentials missing — skipping email.")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg["From"] = settings.SMTP_USER
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject

        msg.attach(MIMEText(body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.login(settings.SMTP_USER, settings.SMTP_PASS)
            server.send_message(msg)

        logger.info(f"Email sent to {', '.join(recipients)}")
        return True

    except Exception as e:
        logger.error(f"Email failed: {e}")
        raise
