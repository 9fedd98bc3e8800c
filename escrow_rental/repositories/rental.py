from datetime import datetime
from sqlalchemy.orm import Session

from escrow_rental.db.models.rental import Rental as RentalModel
from escrow_rental.domain.rental_lifecycle import RentalStatus, sqlalchemy_status_predicate


def get_rental_by_item_id(db: Session, item_id: int) -> RentalModel | None:
    """Get a rental by item ID."""
    return db.get(RentalModel, item_id)


def create_rental(
    db: Session,
    item_id: int,
    price: int,
    seller: str,
    asset_token_id: int,
    created_at: datetime,
) -> RentalModel:
    """Create a new rental in the database. Pure data access - no business logic."""
    db_rental = RentalModel(
        item_id=item_id,
        price=price,
        seller=seller,
        buyer=None,
        paid=False,
        received=False,
        confirmed=False,
        disputed=False,
        refunded=False,
        created_at=created_at,
        asset_token_id=asset_token_id,
    )
    db.add(db_rental)
    db.flush()
    return db_rental


def save_rental(db: Session, rental: RentalModel) -> RentalModel:
    """Flush pending changes on a rental so later reads in the unit see them."""
    db.flush()
    return rental


def get_all_rentals_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    seller: str | None = None,
    buyer: str | None = None,
    status: RentalStatus | None = None,
) -> tuple[list[RentalModel], int]:
    """
    Get all rentals with pagination and optional filters.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page
        seller: Optional filter by seller address
        buyer: Optional filter by buyer address
        status: Optional filter by derived lifecycle status. The precedence
                between flags is a domain rule centralized in rental_lifecycle.

    Returns:
        Tuple of (list of rentals, total count)
    """
    query = db.query(RentalModel)

    if seller is not None:
        query = query.filter(RentalModel.seller == seller)

    if buyer is not None:
        query = query.filter(RentalModel.buyer == buyer)

    if status is not None:
        query = query.filter(sqlalchemy_status_predicate(status, model=RentalModel))

    total = query.count()
    skip = (page - 1) * page_size
    rentals = query.order_by(RentalModel.item_id).offset(skip).limit(page_size).all()
    return rentals, total
