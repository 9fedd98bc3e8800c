from sqlalchemy import Column, String

from escrow_rental.db.base import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key = Column(String(64), primary_key=True)
    value = Column(String, nullable=False)
