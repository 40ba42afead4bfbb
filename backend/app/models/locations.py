from sqlalchemy import Column, Integer, Text
from app.core.db import Base

class Location(Base):
    __tablename__ = "locations"

    # ids come from the reference feed, never generated here
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=False)

    time_zone_name = Column(Text, nullable=True)
    utc_offset = Column(Text, nullable=False)        # "-05:00"
