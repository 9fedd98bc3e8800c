from sqlalchemy import Column, Integer, String, DateTime, JSON

from escrow_rental.db.base import Base


class RentalEvent(Base):
    __tablename__ = "rental_events"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(32), nullable=False, index=True)
    item_id = Column(Integer, nullable=False, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)
