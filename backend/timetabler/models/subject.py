import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabler.db.base import Base


class SubjectType(str, Enum):
    theory = "theory"
    lab = "lab"
    practical = "practical"
    project = "project"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Institution-wide filler subjects (library, internship) have no department.
    department_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)
    hours_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    subject_type: Mapped[SubjectType] = mapped_column(
        SAEnum(SubjectType, name="subject_type"), nullable=False, default=SubjectType.theory
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
