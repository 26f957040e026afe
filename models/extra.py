"""
Extras catalog (tours, rentals, services, multi-night packages)
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, Text

from database.connection import Base


class Extra(Base):
    __tablename__ = "extras"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    is_package = Column(Boolean, nullable=False, default=False)
    included_nights = Column(Integer, nullable=True)  # only for packages

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Extra(id={self.id}, name='{self.name}')>"
