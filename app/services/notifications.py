
import logging
import smtplib
from email.message import EmailMessage
from app.config import settings

logger = logging.getLogger(__name__)


class EmailSender:
    """Fire-and-forget transactional email; failures are logged, never raised"""

    @staticmethod
    def send(to: str, subject: str, body: str) -> bool:
        if not settings.smtp_host:
            logger.info("SMTP not configured, skipping email to %s: %s", to, subject)
            return False

        msg = EmailMessage()
        msg["From"] = settings.mail_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
                smtp.starttls()
                if settings.smtp_user:
                    smtp.login(settings.smtp_user, settings.smtp_password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s (%s): %s", to, subject, e)
            return False
        return True

    @staticmethod
    def order_placed(to: str, name: str, order_id: int, total) -> bool:
        return EmailSender.send(
            to,
            f"Order #{order_id} placed",
            f"Hi {name},\n\nThanks for shopping with us. Your order #{order_id} "
            f"for ₹{total} has been placed.\n",
        )

    @staticmethod
    def order_cancelled(to: str, name: str, order_id: int, refund_status=None) -> bool:
        body = f"Hi {name},\n\nYour order #{order_id} has been cancelled.\n"
        if refund_status:
            body += f"Refund status: {refund_status}.\n"
        return EmailSender.send(to, f"Order #{order_id} cancelled", body)
