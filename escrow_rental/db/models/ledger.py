from sqlalchemy import Column, Integer, String

from escrow_rental.db.base import Base


class Account(Base):
    __tablename__ = "accounts"

    holder = Column(String(128), primary_key=True)
    balance = Column(Integer, nullable=False, default=0)


class EscrowHolding(Base):
    __tablename__ = "escrow_holdings"

    item_id = Column(Integer, primary_key=True, autoincrement=False)
    depositor = Column(String(128), nullable=False)
    amount = Column(Integer, nullable=False)
