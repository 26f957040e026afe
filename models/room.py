"""
Room catalog models: room types and physical rooms
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Numeric, Text, Index
from sqlalchemy.orm import relationship

from database.connection import Base


class RoomType(Base):
    """
    Room category (Standard, Deluxe, Family...)
    Soft-deletable: deleted_at is set instead of removing the row
    """
    __tablename__ = "room_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    rooms = relationship("Room", back_populates="room_type")

    def __repr__(self):
        return f"<RoomType(id={self.id}, name='{self.name}')>"


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        Index("idx_room_type", "room_type_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(20), nullable=False, unique=True, index=True)
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    room_type = relationship("RoomType", back_populates="rooms")
    booking_rooms = relationship("BookingRoom", back_populates="room")

    def __repr__(self):
        return f"<Room(id={self.id}, room_number='{self.room_number}')>"
