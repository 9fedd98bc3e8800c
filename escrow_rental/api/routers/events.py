from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from escrow_rental.api.deps import get_db
from escrow_rental.domain.rental_lifecycle import RentalEventKind
import escrow_rental.repositories.event as event_repo
from escrow_rental.schemas.common import PaginatedResponse
from escrow_rental.schemas.event import RentalEvent

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=PaginatedResponse[RentalEvent])
def get_all_events(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    item_id: int | None = Query(None, description="Filter events by item ID"),
    kind: RentalEventKind | None = Query(None, description="Filter events by kind"),
    after: int | None = Query(
        None, ge=0, description="Only events with a sequence number greater than this"
    ),
    db: Session = Depends(get_db),
):
    """
    Read the append-only event log in order. Watchers poll with ``after`` set to
    the last sequence number they have seen.
    """
    events, total = event_repo.get_all_events_paginated(
        db,
        page=page,
        page_size=page_size,
        item_id=item_id,
        kind=kind.value if kind is not None else None,
        after_id=after,
    )
    return PaginatedResponse(
        items=[RentalEvent.model_validate(event) for event in events],
        total=total,
        page=page,
        page_size=page_size,
    )
