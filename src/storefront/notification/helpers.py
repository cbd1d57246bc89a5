"""Shared helper for handlers that notify a customer.

Renders the template, stores the document model next to the template
context, and creates a Notification. Sending happens in the dispatcher once
the Notification is committed.
"""

import json

import structlog
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.notification.documents import DocumentModel
from storefront.notification.notification import Notification
from storefront.notification.templates import get_template

logger = structlog.get_logger(__name__)


def notify_customer(
    customer_id: str,
    notification_type: str,
    context: dict,
    document: DocumentModel | None = None,
    source_id: str | None = None,
) -> str:
    """Create a notification for a customer and return its id."""
    customer = current_domain.repository_for(Customer).get(customer_id)
    context = {"customer_name": customer.name, **context}
    if document is not None and not document.recipient:
        document.recipient = customer.name

    template_cls = get_template(notification_type)
    rendered = template_cls.render(context)

    notification = Notification.create(
        recipient_id=customer_id,
        recipient_email=customer.email,
        notification_type=notification_type,
        subject=rendered.get("subject"),
        body=rendered["body"],
        template_name=template_cls.__name__,
        source_id=source_id,
        context_data=json.dumps(
            {"context": context, "document": document.to_dict() if document else None},
            default=str,
        ),
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Notification created",
        customer_id=str(customer_id),
        notification_type=notification_type,
        notification_id=str(notification.id),
        has_document=document is not None,
    )
    return str(notification.id)


def notifications_for(source_id: str) -> list[Notification]:
    repo = current_domain.repository_for(Notification)
    return repo._dao.query.filter(source_id=str(source_id)).all().items
