from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.orm import relationship

from database.connection import Base


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (
        Index("idx_guest_email", "email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=True)
    phone = Column(String(40), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    bookings = relationship("Booking", back_populates="guest")

    def __repr__(self):
        return f"<Guest(id={self.id}, name='{self.name}')>"
