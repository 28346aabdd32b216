"""SMTP email adapter (STARTTLS when credentials are configured)."""

import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from pizzeria.notifications.channel.email_port import EmailPort
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


class SmtpEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.timeout = timeout

    def _build(self, to: str, subject: str, body: str, html_body: str | None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="pizzadelivery")
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        message = self._build(to, subject, body, html_body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.username:
                    smtp.starttls()
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("smtp_send_failed", to=to, subject=subject, error=str(exc))
            return {"message_id": None, "status": "failed", "error": "Email transport error"}

        return {"message_id": message["Message-ID"], "status": "sent"}
