"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Notification")
class NotificationCreated:
    """A notification was created and queued for dispatch."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    notification_type: String(required=True)
    subject: String()
    source_id: String()
    created_at: DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationSent:
    """A notification was handed to the email channel."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    sent_at: DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationFailed:
    """A notification could not be rendered or delivered."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    reason: String(required=True)
    failed_at: DateTime(required=True)
