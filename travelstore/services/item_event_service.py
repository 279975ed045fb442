from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlmodel import Session, select

from travelstore.models.item_event import ItemEvent


def log_item_event(
    session: Session,
    item_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """
    Append-only event log for a cart item's timeline
    """

    event = ItemEvent(
        id=str(uuid4()),
        item_id=item_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=datetime.utcnow(),
    )

    session.add(event)


def item_timeline(session: Session, item_id: int) -> List[ItemEvent]:
    return session.exec(
        select(ItemEvent)
        .where(ItemEvent.item_id == item_id)
        .order_by(ItemEvent.created_at)
    ).all()
