import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from event_manager.config.env import MAIL_FROM, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USER

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Outbound email over SMTP with STARTTLS.

    ``send`` never raises: it reports success as a bool so callers can treat
    mail as fire-and-forget.
    """

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        sender: str = MAIL_FROM,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    def _build_message(self, to: str, subject: str, body: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))
        return msg

    def _send_sync(self, to: str, subject: str, body: str) -> None:
        msg = self._build_message(to, subject, body)
        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.sendmail(self.sender, to, msg.as_string())

    async def send(self, to: str, subject: str, body: str) -> bool:
        try:
            # smtplib blocks; keep it off the event loop
            await asyncio.to_thread(self._send_sync, to, subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to} failed: {e}")
            return False
        logger.info(f"Email sent to {to}: {subject}")
        return True


mailer = SmtpMailer()


def get_mailer() -> SmtpMailer:
    return mailer
