# core/email_utils.py

from core.config import settings
from core.notifications import send_email
from core.logging_config import logger


def build_verify_link(token: str) -> str:
    return f"{settings.APP_BASE_URL}/?verify={token}"


def build_reset_link(token: str) -> str:
    return f"{settings.APP_BASE_URL}/?reset={token}"


def _deliver(kind: str, email: str, subject: str, body: str, link: str):
    # The link is always logged so development works without SMTP
    logger.info(f"[auth:{kind}] {email} -> {link}")
    try:
        send_email(subject=subject, body=body, recipients=[email])
    except Exception as e:
        # The account change is already committed; the user can ask for a new link
        logger.error(f"[auth:{kind}] delivery to {email} failed: {type(e).__name__}")


def send_verification_email(email: str, token: str):
    link = build_verify_link(token)
    body = f"""
Olá,

Confirme seu e-mail para ativar sua conta:

{link}

O link expira em {settings.EMAIL_VERIFY_TTL_HOURS} horas.
"""
    _deliver("verify", email, "Confirme seu e-mail", body, link)


def send_password_reset_email(email: str, token: str):
    link = build_reset_link(token)
    body = f"""
Olá,

Recebemos um pedido para redefinir sua senha:

{link}

O link expira em {settings.PASSWORD_RESET_TTL_MINUTES} minutos.
Se você não fez este pedido, ignore este e-mail.
"""
    _deliver("reset", email, "Redefinição de senha", body, link)
