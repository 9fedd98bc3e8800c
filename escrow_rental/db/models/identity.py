from sqlalchemy import Column, Integer, Boolean, String, DateTime

from escrow_rental.db.base import Base


class Identity(Base):
    __tablename__ = "identities"

    address = Column(String(128), primary_key=True)
    verified = Column(Boolean, nullable=False, default=False)
    credential_token_id = Column(Integer, unique=True, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
