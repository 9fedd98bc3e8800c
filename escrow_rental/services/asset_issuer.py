"""Unique, owned tokens: participant credentials and rental asset tokens."""

from enum import Enum
from typing import Protocol

from sqlalchemy.orm import Session

import escrow_rental.repositories.token as token_repo
from escrow_rental.core.clock import utcnow
from escrow_rental.errors import NotFoundError, TransferFailedError


class TokenNamespace(str, Enum):
    CREDENTIAL = "credential"
    ASSET = "asset"


class AssetIssuer(Protocol):
    """What the marketplace needs from a token issuer. Every call is atomic."""

    def mint(self, namespace: TokenNamespace, owner: str) -> int:
        ...

    def transfer(
        self, namespace: TokenNamespace, token_id: int, from_owner: str, to_owner: str
    ) -> None:
        ...

    def owner_of(self, namespace: TokenNamespace, token_id: int) -> str | None:
        ...


class DatabaseAssetIssuer:
    """AssetIssuer backed by the tokens table, with one id counter per namespace."""

    def __init__(self, db: Session):
        self.db = db

    def mint(self, namespace: TokenNamespace, owner: str) -> int:
        token_id = token_repo.next_token_id(self.db, namespace.value)
        token_repo.create_token(self.db, namespace.value, token_id, owner, utcnow())
        return token_id

    def transfer(
        self, namespace: TokenNamespace, token_id: int, from_owner: str, to_owner: str
    ) -> None:
        token = token_repo.get_token(self.db, namespace.value, token_id)
        if not token:
            raise NotFoundError(f"Token {namespace.value}/{token_id} not found")
        if token.owner != from_owner:
            raise TransferFailedError(
                f"Token {namespace.value}/{token_id} is not owned by {from_owner}"
            )
        token_repo.set_token_owner(self.db, token, to_owner)

    def owner_of(self, namespace: TokenNamespace, token_id: int) -> str | None:
        token = token_repo.get_token(self.db, namespace.value, token_id)
        return token.owner if token else None
