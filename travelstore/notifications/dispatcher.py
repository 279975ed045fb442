import logging

from sqlmodel import Session

from travelstore.models.notifications import RecipientRole
from travelstore.notifications.channels import Channel
from travelstore.notifications.events import ItemChange
from travelstore.notifications.rules import NOTIFICATION_RULES
from travelstore.services.item_event_service import log_item_event
from travelstore.services.notification_service import create_notification

logger = logging.getLogger(__name__)


def publish(
    *,
    session: Session,
    item_id: int,
    change: ItemChange,
    owner_id: int | None = None,
    created_by: str = "system",
    extra: dict | None = None,
) -> bool:
    """
    Fire-and-forget change broadcast for a cart item.

    Viewers reload the item and recompute prices from persisted fields, so a
    lost or repeated event never changes what they see. Failures are logged
    and swallowed; the caller's write has already been committed.
    """
    rules = NOTIFICATION_RULES.get(change, {})
    extra = extra or {}

    try:
        if rules.get(Channel.ITEM_TIMELINE):
            log_item_event(
                session,
                item_id=item_id,
                event_type=change.value,
                label=extra.get("label", change.value.replace("_", " ").capitalize()),
                created_by=created_by,
                meta=extra.get("meta"),
            )

        if rules.get(Channel.INAPP_ADMIN):
            create_notification(
                session=session,
                recipient_role=RecipientRole.admin,
                user_id=None,
                trigger_source=change.value,
                related_id=item_id,
                title=extra.get("admin_title", "Cart item update"),
                content=extra.get("admin_content", ""),
            )

        if rules.get(Channel.INAPP_USER) and owner_id is not None:
            create_notification(
                session=session,
                recipient_role=RecipientRole.customer,
                user_id=owner_id,
                trigger_source=change.value,
                related_id=item_id,
                title=extra.get("user_title", "Your package price changed"),
                content=extra.get("user_content", ""),
            )

        session.commit()
    except Exception:
        logger.exception("Publishing %s for item %s failed", change.value, item_id)
        session.rollback()
        return False

    return True
