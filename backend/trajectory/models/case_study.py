from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime
import uuid
from ..core.db import Base


class CaseStudy(Base):
    """
    Historical log of stories shown to users.

    Rows are written best-effort by the story pipeline; ``source_url`` is
    unique so the same link is only logged once.
    """
    __tablename__ = "case_studies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    source_url = Column(String, unique=True, index=True, nullable=False)
    source_type = Column(String(16), nullable=False)  # video | article | linkedin | other
    title = Column(String, nullable=False)
    role_type = Column(String, nullable=True)
    stage = Column(String, nullable=True)
    tags = Column(String, nullable=True)             # "gemini-summarized", "tavily-only", ...
    short_summary = Column(Text, nullable=True)
    fetched_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
