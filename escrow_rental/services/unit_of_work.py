import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from escrow_rental.db.transaction import atomic, in_atomic
from escrow_rental.errors import DomainError

logger = logging.getLogger(__name__)


@contextmanager
def operation(db: Session, name: str, **context) -> Iterator[Session]:
    """
    Run one marketplace operation as a single all-or-nothing unit.

    Rejections are logged with their error code and re-raised unchanged;
    the caller sees exactly the domain error that aborted the unit. An
    operation nested in another only logs its success at DEBUG, since the
    outer unit still decides whether it is kept.
    """
    nested = in_atomic(db)
    try:
        with atomic(db):
            yield db
    except DomainError as e:
        logger.warning("%s rejected [%s] %s: %s", name, e.code, context, e)
        raise
    logger.log(logging.DEBUG if nested else logging.INFO, "%s applied %s", name, context)
