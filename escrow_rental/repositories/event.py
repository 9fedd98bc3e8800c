from datetime import datetime
from sqlalchemy.orm import Session

from escrow_rental.db.models.event import RentalEvent as RentalEventModel


def append_event(
    db: Session, kind: str, item_id: int, payload: dict, created_at: datetime
) -> RentalEventModel:
    """Append an event to the log. Events are never updated or deleted."""
    db_event = RentalEventModel(
        kind=kind,
        item_id=item_id,
        payload=payload,
        created_at=created_at,
    )
    db.add(db_event)
    db.flush()
    return db_event


def get_events_by_item_id(db: Session, item_id: int) -> list[RentalEventModel]:
    """Get all events for a specific item, oldest first."""
    return (
        db.query(RentalEventModel)
        .filter(RentalEventModel.item_id == item_id)
        .order_by(RentalEventModel.id)
        .all()
    )


def get_all_events_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    item_id: int | None = None,
    kind: str | None = None,
    after_id: int | None = None,
) -> tuple[list[RentalEventModel], int]:
    """
    Get events with pagination and optional filters, in log order.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page
        item_id: Optional filter by item ID
        kind: Optional filter by event kind (e.g. "RentalPaid")
        after_id: Only return events appended after this sequence number

    Returns:
        Tuple of (list of events, total count)
    """
    query = db.query(RentalEventModel)

    if item_id is not None:
        query = query.filter(RentalEventModel.item_id == item_id)

    if kind is not None:
        query = query.filter(RentalEventModel.kind == kind)

    if after_id is not None:
        query = query.filter(RentalEventModel.id > after_id)

    total = query.count()
    skip = (page - 1) * page_size
    events = query.order_by(RentalEventModel.id).offset(skip).limit(page_size).all()
    return events, total
