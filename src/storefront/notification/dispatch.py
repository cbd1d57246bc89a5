"""Notification dispatch: renders the attachment and sends the email.

Reacts to NotificationCreated. Whatever goes wrong while rendering the
document or talking to the email channel is recorded on the Notification as
FAILED; nothing is raised back to the code path that created it.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.channel import get_email_channel
from storefront.notification.documents import DocumentModel, get_renderer
from storefront.notification.events import NotificationCreated
from storefront.notification.notification import Notification, NotificationStatus

logger = structlog.get_logger(__name__)


def _attachment_for(notification: Notification):
    data = json.loads(notification.context_data) if notification.context_data else {}
    document = data.get("document")
    if not document:
        return None
    return get_renderer().render(DocumentModel.from_dict(document))


@storefront.event_handler(part_of=Notification)
class NotificationDispatcher:
    """Sends notifications through the email channel when they are created."""

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        repo = current_domain.repository_for(Notification)

        try:
            notification = repo.get(event.notification_id)
        except ObjectNotFoundError:
            logger.error("Failed to load notification for dispatch", notification_id=str(event.notification_id))
            return

        if NotificationStatus(notification.status) != NotificationStatus.PENDING:
            logger.info(
                "Notification not in PENDING status, skipping dispatch",
                notification_id=str(event.notification_id),
                status=notification.status,
            )
            return

        try:
            attachment = _attachment_for(notification)
            result = get_email_channel().send(
                to=notification.recipient_email,
                subject=notification.subject or "",
                body=notification.body,
                attachment=attachment,
            )

            if result.get("status") == "sent":
                notification.mark_sent(attachment_name=attachment.filename if attachment else None)
            else:
                notification.mark_failed(result.get("error", "Unknown dispatch error"))
        except Exception as e:
            notification.mark_failed(str(e))
            logger.error(
                "Notification dispatch failed",
                notification_id=str(notification.id),
                error=str(e),
            )

        repo.add(notification)
