# blog_api/infrastructure/mail/smtp_mailer.py
import logging
import smtplib
from email.mime.text import MIMEText

from ...application.ports.mailer import Mailer

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request"
RESET_BODY = (
    "You requested a password reset.\n\n"
    "Open the link below to choose a new password:\n"
    "{reset_link}\n\n"
    "The link expires in one hour. If you did not request this, ignore this email.\n"
)


class SmtpMailer(Mailer):
    def __init__(self, host: str, port: int, username: str = "", password: str = "",
                 from_email: str = "", timeout: int = 10):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SmtpMailer":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_email=settings.SMTP_FROM_EMAIL,
            timeout=settings.SMTP_TIMEOUT,
        )

    def send(self, to_email: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                s.starttls()
                if self.username:
                    s.login(self.username, self.password)
                s.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to_email}: {e}")
            raise
        logger.info(f"Sent '{subject}' email to {to_email}")

    def send_password_reset(self, to_email: str, reset_link: str) -> None:
        self.send(to_email, RESET_SUBJECT, RESET_BODY.format(reset_link=reset_link))
