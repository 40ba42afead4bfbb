import uuid
from sqlalchemy import JSON, Column, DateTime, Text, Uuid
from sqlalchemy.sql import func
from app.core.db import Base

class IngestRun(Base):
    __tablename__ = "ingest_runs"

    run_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    job_name = Column(Text, nullable=False, index=True)
    file_name = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default="running")
    meta = Column(JSON, nullable=False, default=dict)
