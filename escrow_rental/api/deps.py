from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from escrow_rental.db import SessionLocal
from escrow_rental.core.security import decode_token
from escrow_rental.services.asset_issuer import AssetIssuer, DatabaseAssetIssuer
from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger, EscrowLedger

bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_asset_issuer(db: Session = Depends(get_db)) -> AssetIssuer:
    return DatabaseAssetIssuer(db)


def get_escrow_ledger(db: Session = Depends(get_db)) -> EscrowLedger:
    return DatabaseEscrowLedger(db)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Get the calling principal's address from the bearer JWT."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Only access tokens identify a caller
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal = payload.get("sub")
    if not isinstance(principal, str) or not principal.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return principal.strip()
