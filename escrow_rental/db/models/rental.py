from sqlalchemy import Column, Integer, Boolean, String, DateTime

from escrow_rental.db.base import Base


class Rental(Base):
    __tablename__ = "rentals"

    item_id = Column(Integer, primary_key=True, autoincrement=False)
    price = Column(Integer, nullable=False)
    seller = Column(String(128), nullable=False, index=True)
    buyer = Column(String(128), nullable=True, index=True)
    paid = Column(Boolean, nullable=False, default=False)
    received = Column(Boolean, nullable=False, default=False)
    confirmed = Column(Boolean, nullable=False, default=False)
    disputed = Column(Boolean, nullable=False, default=False)
    refunded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    asset_token_id = Column(Integer, unique=True, nullable=False)
