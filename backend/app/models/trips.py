from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Interval, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base

class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment_id = Column(Text, nullable=False, index=True)

    origin_location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)
    destination_location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)

    start_event_time = Column(DateTime(timezone=True), nullable=True, index=True)
    end_event_time = Column(DateTime(timezone=True), nullable=True)
    total_time = Column(Interval, nullable=True)

    is_complete = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    source_run_id = Column(Uuid, nullable=True, index=True)

    origin = relationship("Location", foreign_keys=[origin_location_id])
    destination = relationship("Location", foreign_keys=[destination_location_id])
    events = relationship("EquipmentEvent", back_populates="trip", order_by="EquipmentEvent.event_time_utc")
