from datetime import datetime

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    # Snapshot of the vehicle rate at booking time
    daily_rate = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)
    deposit = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")
    payment_status = Column(String(20), nullable=False, default="PENDING")
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    vehicle = relationship("Vehicle", backref="contracts")
    client = relationship("Client", backref="contracts")
    accessories = relationship(
        "ContractAccessory",
        back_populates="contract",
        order_by="ContractAccessory.position",
        cascade="all, delete-orphan",
    )


class ContractAccessory(Base):
    __tablename__ = "contract_accessories"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(120), nullable=False)
    unit_price_per_day = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    contract = relationship("Contract", back_populates="accessories")
