from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from ..core.db import Base


class UserPathSelection(Base):
    __tablename__ = "user_path_selections"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_profile_id = Column(String(36), ForeignKey("user_profiles.id"), index=True, nullable=False)
    rank = Column(Integer, nullable=False)          # 1..3
    ai_label = Column(String, nullable=False)       # "Conventional Path", ...
    ai_explanation = Column(Text, nullable=False)
    target_role = Column(String, nullable=True)
    target_industry = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    profile = relationship("UserProfile", back_populates="paths")
