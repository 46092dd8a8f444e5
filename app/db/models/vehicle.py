from sqlalchemy import Column, Integer, Boolean, String

from app.db.base import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    daily_rate = Column(Integer, nullable=False)
    # False while in maintenance or retired; blocks bookings regardless of the calendar
    is_operational = Column(Boolean, nullable=False, default=True)
