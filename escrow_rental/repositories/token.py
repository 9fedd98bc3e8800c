from datetime import datetime
from sqlalchemy.orm import Session

from escrow_rental.db.models.token import Token as TokenModel, TokenCounter as TokenCounterModel


def get_token(db: Session, namespace: str, token_id: int) -> TokenModel | None:
    """Get a token by namespace and id."""
    return db.get(TokenModel, (namespace, token_id))


def next_token_id(db: Session, namespace: str) -> int:
    """Advance the namespace counter and return the new id. Ids are never reused."""
    counter = db.get(TokenCounterModel, namespace)
    if counter is None:
        counter = TokenCounterModel(namespace=namespace, last_id=0)
        db.add(counter)
    counter.last_id += 1
    db.flush()
    return counter.last_id


def create_token(
    db: Session, namespace: str, token_id: int, owner: str, minted_at: datetime
) -> TokenModel:
    """Create a token row. Pure data access - no business logic."""
    db_token = TokenModel(
        namespace=namespace,
        token_id=token_id,
        owner=owner,
        minted_at=minted_at,
    )
    db.add(db_token)
    db.flush()
    return db_token


def set_token_owner(db: Session, token: TokenModel, owner: str) -> TokenModel:
    token.owner = owner
    db.flush()
    return token


def get_tokens_by_owner(db: Session, owner: str, namespace: str | None = None) -> list[TokenModel]:
    """Get all tokens owned by a holder, optionally restricted to one namespace."""
    query = db.query(TokenModel).filter(TokenModel.owner == owner)
    if namespace is not None:
        query = query.filter(TokenModel.namespace == namespace)
    return query.order_by(TokenModel.namespace, TokenModel.token_id).all()
