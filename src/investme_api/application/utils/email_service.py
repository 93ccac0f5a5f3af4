from dotenv import load_dotenv
import os
import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

load_dotenv()

logger = logging.getLogger(__name__)

SMTP_HOST = os.environ.get("SMTP_HOST", "")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USER = os.environ.get("SMTP_USER", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")

SMTP_FROM_NAME = os.environ.get("SMTP_FROM_NAME", "Investme")
SMTP_FROM_EMAIL = os.environ.get("SMTP_FROM_EMAIL", "no-reply@investme.com.br")

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173").rstrip("/")
FRONTEND_RESET_URL = f"{FRONTEND_URL}/reset-password"
FRONTEND_CONFIRM_URL = f"{FRONTEND_URL}/confirm-email"


def send_email_html(to_email: str, subject: str, html_content: str) -> bool:
    """Envia um e-mail HTML. Sem SMTP_HOST configurado, apenas registra e retorna False."""
    if not SMTP_HOST:
        logger.warning("SMTP não configurado; e-mail '%s' para %s não enviado", subject, to_email)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>"
    msg["To"] = to_email

    msg.attach(MIMEText(html_content, "html"))

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as server:
        server.starttls()
        if SMTP_USER:
            server.login(SMTP_USER, SMTP_PASSWORD)
        server.sendmail(SMTP_FROM_EMAIL, [to_email], msg.as_string())
    logger.info("E-mail '%s' enviado para %s", subject, to_email)
    return True


def _layout(title: str, body: str, button_url: str, button_label: str, footer: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; background-color:#f6f6f6; padding: 20px;">
        <div style="max-width: 600px; margin: auto; background: white; border-radius: 8px; padding: 30px;">
            <h2 style="color:#333; text-align:center;">{title}</h2>
            {body}
            <div style="text-align:center; margin: 30px 0;">
                <a href="{html.escape(button_url, quote=True)}"
                   style="padding: 12px 25px; background-color:#0f4c81; color:white;
                          text-decoration:none; border-radius:5px; font-size:16px;">
                    {button_label}
                </a>
            </div>
            <p style="font-size:14px; color:#666;">{footer}</p>
            <hr style="margin-top:30px; border: none; border-top: 1px solid #eee;">
            <p style="font-size:12px; color:#999; text-align:center;">
                Caso você não tenha solicitado essa ação, apenas ignore este e-mail.
            </p>
        </div>
    </div>
    """


def reset_password_template(reset_url: str, user_name: str | None = None) -> str:
    name = html.escape(user_name) if user_name else "Olá"
    body = f"""
            <p style="font-size:15px; color:#444;">{name}, recebemos uma solicitação para redefinir sua senha.</p>
            <p style="font-size:15px; color:#444;">Clique no botão abaixo para continuar:</p>"""
    return _layout("Redefinição de Senha", body, reset_url, "Redefinir Senha",
                   "Este link é válido por <strong>15 minutos</strong>.")


def email_confirmation_template(confirm_url: str, user_name: str | None = None) -> str:
    name = html.escape(user_name) if user_name else "Olá"
    body = f"""
            <p style="font-size:15px; color:#444;">{name}, bem-vindo à Investme!</p>
            <p style="font-size:15px; color:#444;">Confirme seu e-mail para continuar o cadastro:</p>"""
    return _layout("Confirmação de E-mail", body, confirm_url, "Confirmar E-mail",
                   "Este link é válido por <strong>24 horas</strong>.")
