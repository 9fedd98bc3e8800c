from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from escrow_rental.api.deps import (
    get_asset_issuer,
    get_current_principal,
    get_db,
    get_escrow_ledger,
)
from escrow_rental.domain.rental_lifecycle import RentalStatus
from escrow_rental.services.asset_issuer import AssetIssuer
from escrow_rental.services.escrow_ledger import EscrowLedger
from escrow_rental.services.dispute import resolve_dispute
from escrow_rental.services.rental import (
    confirm_receipt,
    create_rental,
    get_rental,
    raise_dispute,
    refund_buyer,
    rent_item,
)
import escrow_rental.repositories.rental as rental_repo
from escrow_rental.schemas.common import PaginatedResponse
from escrow_rental.schemas.rental import (
    DisputeResolution,
    Rental,
    RentalCreate,
    RentalPayment,
)

router = APIRouter(prefix="/rentals", tags=["rentals"])


@router.post("", response_model=Rental, status_code=status.HTTP_201_CREATED)
def create_new_rental(
    rental_data: RentalCreate,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
):
    """
    List an item for rent. The caller must be verified and becomes the seller.
    """
    rental = create_rental(
        db,
        principal,
        item_id=rental_data.item_id,
        price=rental_data.price,
        issuer=issuer,
    )
    return Rental.model_validate(rental)


@router.get("", response_model=PaginatedResponse[Rental])
def get_all_rentals(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    seller: str | None = Query(None, description="Filter rentals by seller address"),
    buyer: str | None = Query(None, description="Filter rentals by buyer address"),
    rental_status: RentalStatus | None = Query(
        None, alias="status", description="Filter by lifecycle status"
    ),
    db: Session = Depends(get_db),
):
    """
    Get all rentals with pagination and optional filters. Rentals are public history.
    """
    rentals, total = rental_repo.get_all_rentals_paginated(
        db,
        page=page,
        page_size=page_size,
        seller=seller,
        buyer=buyer,
        status=rental_status,
    )
    return PaginatedResponse(
        items=[Rental.model_validate(rental) for rental in rentals],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{item_id}", response_model=Rental)
def get_rental_by_item_id(item_id: int, db: Session = Depends(get_db)):
    rental = get_rental(db, item_id)
    return Rental.model_validate(rental)


@router.post("/{item_id}/payment", response_model=Rental)
def pay_rental(
    item_id: int,
    payment: RentalPayment,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
    ledger: EscrowLedger = Depends(get_escrow_ledger),
):
    """
    Pay the exact price into escrow. The caller must be verified and becomes the buyer.
    """
    rental = rent_item(db, principal, item_id, payment.amount, issuer=issuer, ledger=ledger)
    return Rental.model_validate(rental)


@router.post("/{item_id}/confirmation", response_model=Rental)
def confirm_rental_receipt(
    item_id: int,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
    ledger: EscrowLedger = Depends(get_escrow_ledger),
):
    """
    Buyer confirms receipt. Funds go to the seller, the asset token to the buyer.
    """
    rental = confirm_receipt(db, principal, item_id, issuer=issuer, ledger=ledger)
    return Rental.model_validate(rental)


@router.post("/{item_id}/refund", response_model=Rental)
def refund_rental(
    item_id: int,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
    ledger: EscrowLedger = Depends(get_escrow_ledger),
):
    rental = refund_buyer(db, principal, item_id, issuer=issuer, ledger=ledger)
    return Rental.model_validate(rental)


@router.post("/{item_id}/dispute", response_model=Rental)
def dispute_rental(
    item_id: int,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    rental = raise_dispute(db, principal, item_id)
    return Rental.model_validate(rental)


@router.post("/{item_id}/resolution", response_model=Rental)
def resolve_rental_dispute(
    item_id: int,
    resolution: DisputeResolution,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
    ledger: EscrowLedger = Depends(get_escrow_ledger),
):
    """
    Settle an open dispute. Administrator only.
    """
    rental = resolve_dispute(
        db, principal, item_id, resolution.decision, issuer=issuer, ledger=ledger
    )
    return Rental.model_validate(rental)
