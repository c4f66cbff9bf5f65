"""
specialty.py

특기(Specialty) / 요구사항(Requirement) 및
회원별 진행 상태(UserSpecialty, UserRequirement) 모델 정의 파일.

상태 전이 규칙:
- UserRequirement : PENDING → APPROVED / REJECTED (관리자 판정으로만 변경)
                    새 답변 제출 시 항상 PENDING으로 초기화
- UserSpecialty   : IN_PROGRESS → WAITING_APPROVAL → COMPLETED
                    COMPLETED는 관리자의 최종 승인(award)으로만 도달

설계 원칙:
- (user, specialty), (user, requirement) 조합은 각각 유일
- 진행 상태 row는 최초 제출/판정 시점에 생성(upsert)
- 특기 삭제 시 요구사항 및 진행 상태는 ORM cascade로 함께 삭제

"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dbvclub.db.base import Base
from dbvclub.models.user import DbvClass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequirementType(str, Enum):
    TEXT = "TEXT"
    FILE = "FILE"


class RequirementStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserSpecialtyStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_APPROVAL = "WAITING_APPROVAL"
    COMPLETED = "COMPLETED"


class Specialty(Base):
    __tablename__ = "specialties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    area: Mapped[str] = mapped_column(String(80), nullable=False, default="Geral")
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    requirements = relationship(
        "Requirement",
        back_populates="specialty",
        order_by=lambda: [Requirement.position, Requirement.description],
        cascade="all, delete-orphan",
    )
    user_specialties = relationship(
        "UserSpecialty",
        back_populates="specialty",
        cascade="all, delete-orphan",
    )


class Requirement(Base):
    """요구사항.

    - specialty_id 가 있으면 특기 소속, dbv_class 가 있으면 클래스 커리큘럼 소속
    - position: 특기 안에서의 순서 (생성 순서 유지)
    """

    __tablename__ = "requirements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    specialty_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("specialties.id", ondelete="CASCADE"), nullable=True, index=True
    )
    dbv_class: Mapped[DbvClass | None] = mapped_column(
        SAEnum(DbvClass, name="dbv_class"), nullable=True, index=True
    )

    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    area: Mapped[str | None] = mapped_column(String(80), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[RequirementType] = mapped_column(
        SAEnum(RequirementType, name="requirement_type"), nullable=False, default=RequirementType.TEXT
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    specialty = relationship("Specialty", back_populates="requirements")
    user_requirements = relationship(
        "UserRequirement",
        back_populates="requirement",
        cascade="all, delete-orphan",
    )


class UserSpecialty(Base):
    __tablename__ = "user_specialties"
    __table_args__ = (
        UniqueConstraint("user_id", "specialty_id", name="uq_user_specialties_user_specialty"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    specialty_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("specialties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[UserSpecialtyStatus] = mapped_column(
        SAEnum(UserSpecialtyStatus, name="user_specialty_status"),
        nullable=False,
        default=UserSpecialtyStatus.IN_PROGRESS,
    )
    awarded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User")
    specialty = relationship("Specialty", back_populates="user_specialties")


class UserRequirement(Base):
    """회원의 요구사항 답변 및 판정.

    completed_at: 제출 시각 또는 승인 시각 (승인 외 판정 시 None)
    """

    __tablename__ = "user_requirements"
    __table_args__ = (
        UniqueConstraint("user_id", "requirement_id", name="uq_user_requirements_user_requirement"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    requirement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("requirements.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[RequirementStatus] = mapped_column(
        SAEnum(RequirementStatus, name="requirement_status"),
        nullable=False,
        default=RequirementStatus.PENDING,
    )
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    answer_file_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User")
    requirement = relationship("Requirement", back_populates="user_requirements")
