from sqlalchemy.orm import Session

import escrow_rental.repositories.identity as identity_repo
import escrow_rental.repositories.system_setting as system_repo
from escrow_rental.core.clock import utcnow
from escrow_rental.db.models.identity import Identity as IdentityModel
from escrow_rental.errors import AlreadyVerifiedError, NotFoundError, UnauthorizedError
from escrow_rental.services.asset_issuer import AssetIssuer, DatabaseAssetIssuer, TokenNamespace
from escrow_rental.services.unit_of_work import operation


def require_admin(db: Session, caller: str) -> None:
    """Raise UnauthorizedError unless ``caller`` is the marketplace administrator."""
    if caller != system_repo.get_admin_address(db):
        raise UnauthorizedError("Only the administrator may do this")


def is_verified(db: Session, principal: str) -> bool:
    return identity_repo.is_verified(db, principal)


def get_identity(db: Session, principal: str) -> IdentityModel:
    identity = identity_repo.get_identity(db, principal)
    if not identity:
        raise NotFoundError(f"Identity {principal} not found")
    return identity


def submit_identity(db: Session, caller: str) -> IdentityModel:
    """
    Self-declared verification.

    - Fails if the caller is already verified
    - Marks the caller verified without a credential token
    """
    with operation(db, "submit_identity", caller=caller):
        if identity_repo.is_verified(db, caller):
            raise AlreadyVerifiedError(f"Identity {caller} is already verified")

        identity = identity_repo.mark_verified(db, caller, verified_at=utcnow())
    return identity


def approve_identity(
    db: Session,
    admin: str,
    subject: str,
    issuer: AssetIssuer | None = None,
) -> IdentityModel:
    """
    Administrator approval of a participant's identity.

    - Only the administrator may approve
    - Fails if the subject is already verified
    - Mints a credential token owned by the subject and records it; a
      credential is assigned once and never reassigned
    """
    issuer = issuer or DatabaseAssetIssuer(db)

    with operation(db, "approve_identity", admin=admin, subject=subject):
        require_admin(db, admin)

        if identity_repo.is_verified(db, subject):
            raise AlreadyVerifiedError(f"Identity {subject} is already verified")

        credential_token_id = issuer.mint(TokenNamespace.CREDENTIAL, subject)
        identity = identity_repo.mark_verified(
            db,
            subject,
            verified_at=utcnow(),
            credential_token_id=credential_token_id,
        )
    return identity
