"""
Email Notification Client

Handles email delivery via SMTP with:
- Async SMTP using aiosmtplib
- HTML email template (Jinja2, autoescaped)
- Plain text fallback
- Test mode

Each call makes a single delivery attempt bounded by the configured timeout.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from pathlib import Path
from typing import Optional

import aiosmtplib
import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from notification_service.models.notification import DeliveryResult, NotificationPayload

logger = structlog.get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class EmailClient:
    """
    Async email client for notification delivery.

    Uses aiosmtplib for async SMTP and Jinja2 for templating.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        use_tls: bool = False,
        brand_name: str = "Notification Service",
        timeout: float = 10.0,
        test_mode: bool = False,
    ):
        """
        Initialize email client.

        Args:
            smtp_host: SMTP server hostname
            smtp_port: SMTP server port (587 for STARTTLS, 465 for implicit TLS)
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Sender email address
            use_tls: Connect with implicit TLS instead of STARTTLS
            brand_name: Name shown in the email footer
            timeout: SMTP timeout in seconds
            test_mode: If True, log instead of sending
        """
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.use_tls = use_tls
        self.brand_name = brand_name
        self.timeout = timeout
        self.test_mode = test_mode

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        if not test_mode and not all([smtp_host, from_email]):
            logger.warning(
                "SMTP not configured, running in test mode",
                test_mode=True,
            )
            self.test_mode = True

    async def send(self, to_address: str, payload: NotificationPayload) -> DeliveryResult:
        """
        Send notification email with HTML and plain text bodies.

        Args:
            to_address: Recipient email address
            payload: Normalized notification payload

        Returns:
            DeliveryResult with the Message-ID on success, or the SMTP error
            text on failure. Never raises.
        """
        if self.test_mode:
            logger.info(
                "TEST MODE: Email would be sent",
                to=self._mask_email(to_address),
                subject=payload.title,
            )
            return DeliveryResult.delivered(message_id="test-mode")

        message = self._build_message(to_address, payload)
        message_id = message["Message-ID"]

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                use_tls=self.use_tls,
                start_tls=False if self.use_tls else None,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.error(
                "Failed to send email",
                to=self._mask_email(to_address),
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(str(e) or type(e).__name__)

        logger.info(
            "Email sent successfully",
            to=self._mask_email(to_address),
            notification_id=str(payload.notification_id),
            message_id=message_id,
        )

        return DeliveryResult.delivered(message_id=message_id)

    def _build_message(self, to_address: str, payload: NotificationPayload) -> MIMEMultipart:
        """Assemble the multipart/alternative message for a payload."""
        message = MIMEMultipart("alternative")
        message["Subject"] = payload.title
        message["From"] = self.from_email
        message["To"] = to_address
        message["Date"] = formatdate(localtime=False)
        message["Message-ID"] = make_msgid(domain=self._sender_domain())

        # Plain text first so clients prefer the HTML part
        message.attach(MIMEText(self.render_text(payload), "plain", "utf-8"))
        message.attach(MIMEText(self.render_html(payload), "html", "utf-8"))

        return message

    def render_html(self, payload: NotificationPayload) -> str:
        """
        Render HTML email template.

        Title and message are escaped by the autoescaping environment.

        Args:
            payload: Notification payload to render

        Returns:
            Rendered HTML string
        """
        template = self.jinja_env.get_template("notification.html")
        return template.render(**self._template_context(payload))

    def render_text(self, payload: NotificationPayload) -> str:
        """Render plain text email version."""
        template = self.jinja_env.get_template("notification.txt")
        return template.render(**self._template_context(payload))

    def _template_context(self, payload: NotificationPayload) -> dict[str, str]:
        return {
            "title": payload.title,
            "message": payload.body,
            "brand_name": self.brand_name,
            "sent_on": payload.created_at.strftime("%Y-%m-%d"),
        }

    def _sender_domain(self) -> Optional[str]:
        if self.from_email and "@" in self.from_email:
            return self.from_email.rsplit("@", 1)[1].strip(">")
        return None

    def _mask_email(self, email: str) -> str:
        """Mask email for logging (PII protection)."""
        if "@" in email:
            user, domain = email.rsplit("@", 1)
            if len(user) > 3:
                masked_user = user[:2] + "***"
            else:
                masked_user = "***"
            return f"{masked_user}@{domain}"
        return "***"
