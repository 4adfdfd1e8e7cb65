from sqlalchemy import Column, String, Text, Enum, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
import enum
from ..core.db import Base


class CareerStage(str, enum.Enum):
    STUDENT = "Student"
    NEW_GRAD = "NewGrad"
    CAREER_SWITCH = "CareerSwitch"
    MID_CAREER = "MidCareer"


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=True)
    current_status = Column(String, nullable=False)
    interests = Column(Text, nullable=False)
    location = Column(String, nullable=True)
    timeline = Column(String, nullable=False)
    stage = Column(Enum(CareerStage, values_callable=lambda e: [m.value for m in e]), nullable=False)
    extra_info = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    paths = relationship(
        "UserPathSelection",
        back_populates="profile",
        order_by="UserPathSelection.rank",
        cascade="all, delete-orphan",
    )
