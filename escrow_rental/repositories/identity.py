from datetime import datetime
from sqlalchemy.orm import Session

from escrow_rental.db.models.identity import Identity as IdentityModel


def get_identity(db: Session, address: str) -> IdentityModel | None:
    """Get an identity by participant address."""
    return db.get(IdentityModel, address)


def is_verified(db: Session, address: str) -> bool:
    identity = get_identity(db, address)
    return bool(identity and identity.verified)


def mark_verified(
    db: Session,
    address: str,
    verified_at: datetime,
    credential_token_id: int | None = None,
) -> IdentityModel:
    """Record an identity as verified. Pure data access - no business logic."""
    identity = get_identity(db, address)
    if identity is None:
        identity = IdentityModel(address=address)
        db.add(identity)

    identity.verified = True
    identity.verified_at = verified_at
    if credential_token_id is not None:
        identity.credential_token_id = credential_token_id

    db.flush()
    return identity


def get_all_identities_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    with_credential: bool | None = None,
) -> tuple[list[IdentityModel], int]:
    """Get verified identities with pagination, optionally by credential presence."""
    query = db.query(IdentityModel).filter(IdentityModel.verified.is_(True))

    if with_credential is not None:
        if with_credential:
            query = query.filter(IdentityModel.credential_token_id.isnot(None))
        else:
            query = query.filter(IdentityModel.credential_token_id.is_(None))

    total = query.count()
    skip = (page - 1) * page_size
    identities = query.order_by(IdentityModel.address).offset(skip).limit(page_size).all()
    return identities, total
