from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from timetabler.db.base import Base


class StaffSubject(Base):
    __tablename__ = "staff_subjects"
    __table_args__ = (UniqueConstraint("staff_id", "subject_id", name="uq_staff_subjects_pair"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    staff_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
