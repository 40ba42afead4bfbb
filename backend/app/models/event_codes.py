from sqlalchemy import Column, Integer, Text
from app.core.db import Base

class EventCode(Base):
    __tablename__ = "event_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Text, nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    long_description = Column(Text, nullable=False, default="")
