from sqlalchemy import Column, Integer, String, DateTime

from escrow_rental.db.base import Base


class TokenCounter(Base):
    __tablename__ = "token_counters"

    namespace = Column(String(32), primary_key=True)
    last_id = Column(Integer, nullable=False, default=0)


class Token(Base):
    __tablename__ = "tokens"

    namespace = Column(String(32), primary_key=True)
    token_id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(128), nullable=False, index=True)
    minted_at = Column(DateTime(timezone=True), nullable=False)
