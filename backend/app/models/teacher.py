"""
Modèles SQLAlchemy pour les enseignants et leurs classes.
Une classe (TeacherSubject) associe un enseignant à une matière.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Teacher(Base):
    """Profil enseignant (1:1 avec users)."""
    __tablename__ = "teachers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(String(50), unique=True, nullable=False)  # matricule, ex: "TCH001"
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    department_id = Column(UUID(as_uuid=True), ForeignKey("departments.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="teacher_profile")
    department = relationship("Department")
    classes = relationship("TeacherSubject", back_populates="teacher")


class TeacherSubject(Base):
    """Association enseignant ↔ matière, identifiée par un code de classe."""
    __tablename__ = "teacher_subjects"
    __table_args__ = (
        UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_code = Column(String(100), nullable=False)  # "<teacherId>-<subjectCode>"
    created_at = Column(DateTime, server_default=func.now())

    teacher = relationship("Teacher", back_populates="classes")
    subject = relationship("Subject")
