import logging

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from config import EMAIL_ENABLED, EMAIL_FROM, EMAIL_FROM_NAME, EMAIL_PORT, EMAIL_SERVER

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self):
        self.enabled = EMAIL_ENABLED
        self.config = ConnectionConfig(
            MAIL_USERNAME="",
            MAIL_PASSWORD="",
            MAIL_FROM=EMAIL_FROM,
            MAIL_PORT=EMAIL_PORT,
            MAIL_SERVER=EMAIL_SERVER,
            MAIL_FROM_NAME=EMAIL_FROM_NAME,
            MAIL_STARTTLS=False,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=False,
            VALIDATE_CERTS=False,
        )
        self.mailer = FastMail(self.config)

    async def send_email(self, to_email: str, subject: str, body: str):
        """Send a plain-text email. Runs after the response, so delivery problems are only logged."""
        if not self.enabled:
            logger.debug("Email disabled, skipping %r to %s", subject, to_email)
            return
        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=body,
            subtype="plain",
        )
        try:
            await self.mailer.send_message(message)
        except Exception:
            logger.exception("Failed to send %r to %s", subject, to_email)

    async def send_rental_request_submitted_email(
        self, email: str, reference: str, room_number: str
    ):
        await self.send_email(
            email,
            f"📨 Rental Request Received - {reference}",
            f"""Hello,

We have received your rental request {reference} for room {room_number}.

An administrator will review it shortly. You can follow its status on the booking page.

Best regards,
The Management Team""",
        )

    async def send_rental_request_approved_email(
        self, email: str, reference: str, room_number: str, start_date, end_date
    ):
        await self.send_email(
            email,
            f"✅ Rental Request Approved - {reference}",
            f"""Hello,

Good news! Your rental request {reference} for room {room_number} has been approved.

Your lease runs from {start_date} to {end_date}.

Welcome to the village.

Best regards,
The Management Team""",
        )

    async def send_rental_request_rejected_email(
        self, email: str, reference: str, room_number: str, reason: str
    ):
        await self.send_email(
            email,
            f"❌ Rental Request Declined - {reference}",
            f"""Hello,

Unfortunately your rental request {reference} for room {room_number} was not approved.

Reason: {reason}

Please acknowledge this decision on the booking page before submitting a new request.

Best regards,
The Management Team""",
        )
