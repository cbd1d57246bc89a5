"""SMTP email adapter for real delivery."""

import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from storefront.notification.channel.email_port import Attachment, EmailPort


class SMTPEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str = "orders@storefront.local",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, to, subject, body, attachment):
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        if attachment is not None:
            maintype, subtype = attachment.mime_type.split("/", 1)
            message.add_attachment(attachment.content, maintype=maintype, subtype=subtype, filename=attachment.filename)
        return message

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        attachment: Attachment | None = None,
    ) -> dict:
        message = self._build_message(to, subject, body, attachment)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(message)
        except (OSError, smtplib.SMTPException) as exc:
            return {"message_id": None, "status": "failed", "error": str(exc)}
        return {"message_id": message["Message-ID"], "status": "sent"}
