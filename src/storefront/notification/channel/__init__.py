"""Email channel registry.

Uses the fake adapter by default; setting SMTP_HOST switches to real SMTP
delivery.
"""

import os

from storefront.notification.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        host = os.getenv("SMTP_HOST")
        if host:
            from storefront.notification.channel.smtp_email import SMTPEmailAdapter
            from storefront.utils.settings import setting

            _email_channel = SMTPEmailAdapter(
                host=host,
                port=int(os.getenv("SMTP_PORT", "587")),
                username=os.getenv("SMTP_USERNAME"),
                password=os.getenv("SMTP_PASSWORD"),
                sender=setting("NOTIFICATION_SENDER"),
            )
        else:
            from storefront.notification.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
    return _email_channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
