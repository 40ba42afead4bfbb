from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship
from app.core.db import Base

class EquipmentEvent(Base):
    __tablename__ = "equipment_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment_id = Column(Text, nullable=False, index=True)

    event_code_id = Column(Integer, ForeignKey("event_codes.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)

    event_time_local = Column(DateTime(timezone=False), nullable=False)
    event_time_utc = Column(DateTime(timezone=True), nullable=False, index=True)

    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=True, index=True)
    source_run_id = Column(Uuid, nullable=True, index=True)

    event_code = relationship("EventCode")
    location = relationship("Location")
    trip = relationship("Trip", back_populates="events")
