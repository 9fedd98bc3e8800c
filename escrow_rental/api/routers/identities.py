from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from escrow_rental.api.deps import get_asset_issuer, get_current_principal, get_db
from escrow_rental.services.asset_issuer import AssetIssuer
from escrow_rental.services.identity import (
    approve_identity,
    get_identity,
    is_verified,
    require_admin,
    submit_identity,
)
import escrow_rental.repositories.identity as identity_repo
from escrow_rental.schemas.common import PaginatedResponse
from escrow_rental.schemas.identity import Identity, VerificationStatus

router = APIRouter(prefix="/identities", tags=["identities"])


@router.post("", response_model=Identity, status_code=status.HTTP_201_CREATED)
def submit_own_identity(
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    """
    Self-declare the caller as verified. Allowed once per participant.
    """
    identity = submit_identity(db, principal)
    return Identity.model_validate(identity)


@router.post("/{address}/approve", response_model=Identity, status_code=status.HTTP_201_CREATED)
def approve_participant_identity(
    address: str,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
    issuer: AssetIssuer = Depends(get_asset_issuer),
):
    """
    Verify a participant and issue their credential token. Administrator only.
    """
    identity = approve_identity(db, principal, address, issuer=issuer)
    return Identity.model_validate(identity)


@router.get("", response_model=PaginatedResponse[Identity])
def get_all_identities(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    with_credential: bool | None = Query(
        None, description="Filter by whether a credential token was issued"
    ),
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    """
    List verified identities. Administrator only.
    """
    require_admin(db, principal)
    identities, total = identity_repo.get_all_identities_paginated(
        db, page=page, page_size=page_size, with_credential=with_credential
    )
    return PaginatedResponse(
        items=[Identity.model_validate(identity) for identity in identities],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{address}/verified", response_model=VerificationStatus)
def get_verification_status(address: str, db: Session = Depends(get_db)):
    """
    Whether a participant may list or rent items. Public.
    """
    return VerificationStatus(address=address, verified=is_verified(db, address))


@router.get("/{address}", response_model=Identity)
def get_identity_by_address(address: str, db: Session = Depends(get_db)):
    identity = get_identity(db, address)
    return Identity.model_validate(identity)
