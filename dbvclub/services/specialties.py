"""
services/specialties.py

특기(Specialty) 카탈로그 및 회원별 특기 배정/조회 로직 모음.

주요 기능:
- 특기 카탈로그 CRUD (요구사항 순서는 position 으로 보존)
- 회원에게 특기 배정 (이미 있으면 기존 row 그대로 반환)
- 회원의 특기 목록 / 특기 또는 클래스 단위 요구사항 진행 조회

설계 원칙:
- 라우터는 이 파일의 함수만 호출하고 commit/rollback 만 담당
- 존재하지 않는 대상 참조는 NotFoundError, 규칙 위반은 ValueError

관련 파일:
- dbvclub.services.progress : 요구사항 판정 / 보상 로직
- dbvclub.models.specialty  : 특기 / 요구사항 / 진행 상태 모델
- dbvclub.routers.specialties

"""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from dbvclub.core.errors import NotFoundError
from dbvclub.models.specialty import (
    Requirement,
    RequirementType,
    Specialty,
    UserRequirement,
    UserSpecialty,
    UserSpecialtyStatus,
)
from dbvclub.models.user import User, DbvClass


def get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_specialty(db: Session, specialty_id: uuid.UUID) -> Specialty:
    specialty = db.scalar(
        select(Specialty)
        .options(selectinload(Specialty.requirements))
        .where(Specialty.id == specialty_id)
    )
    if not specialty:
        raise NotFoundError("Specialty not found")
    return specialty


def list_specialties(db: Session) -> list[Specialty]:
    return list(
        db.scalars(
            select(Specialty)
            .options(selectinload(Specialty.requirements))
            .order_by(Specialty.name)
        ).all()
    )


def _build_requirements(requirements: list[dict]) -> list[Requirement]:
    built = []
    for position, item in enumerate(requirements):
        description = (item.get("description") or "").strip()
        if not description:
            raise ValueError("requirement description must not be empty")
        built.append(
            Requirement(
                description=description,
                type=item.get("type") or RequirementType.TEXT,
                position=position,
            )
        )
    return built


def _ensure_name_available(db: Session, name: str, *, exclude_id: uuid.UUID | None = None) -> None:
    stmt = select(Specialty.id).where(Specialty.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Specialty.id != exclude_id)
    if db.scalar(stmt):
        raise ValueError("specialty with that name already exists")


"""
특기 생성

- 이름 중복 불가
- 요구사항은 입력 순서대로 position 0, 1, 2 ... 부여

"""
def create_specialty(
    db: Session,
    *,
    name: str,
    area: str,
    image_url: str | None,
    requirements: list[dict],
) -> Specialty:
    name = name.strip()
    _ensure_name_available(db, name)

    specialty = Specialty(name=name, area=area, image_url=image_url)
    specialty.requirements = _build_requirements(requirements)

    db.add(specialty)
    db.flush()
    return specialty


"""
특기 수정

- fields 에 포함된 항목만 변경
- requirements 가 None 이 아니면 기존 요구사항(및 회원 답변)을 모두 교체

"""
def update_specialty(
    db: Session,
    specialty_id: uuid.UUID,
    *,
    fields: dict,
    requirements: list[dict] | None = None,
) -> Specialty:
    specialty = get_specialty(db, specialty_id)

    if "name" in fields and fields["name"] is not None:
        name = fields["name"].strip()
        _ensure_name_available(db, name, exclude_id=specialty.id)
        specialty.name = name
    if "area" in fields and fields["area"] is not None:
        specialty.area = fields["area"]
    if "image_url" in fields:
        specialty.image_url = fields["image_url"]

    if requirements is not None:
        new_requirements = _build_requirements(requirements)
        specialty.requirements.clear()
        db.flush()
        specialty.requirements.extend(new_requirements)

    db.flush()
    return specialty


def delete_specialty(db: Session, specialty_id: uuid.UUID) -> None:
    specialty = get_specialty(db, specialty_id)
    db.delete(specialty)
    db.flush()


def get_user_specialty(db: Session, *, user_id: uuid.UUID, specialty_id: uuid.UUID) -> UserSpecialty | None:
    return db.scalar(
        select(UserSpecialty).where(
            UserSpecialty.user_id == user_id,
            UserSpecialty.specialty_id == specialty_id,
        )
    )


"""
특기 배정

- 이미 배정된 경우 상태를 건드리지 않고 기존 row 반환
- 신규 배정은 IN_PROGRESS 로 시작
- 반환값: (UserSpecialty, 신규 생성 여부)

"""
def assign_specialty(
    db: Session, *, user_id: uuid.UUID, specialty_id: uuid.UUID
) -> tuple[UserSpecialty, bool]:
    existing = get_user_specialty(db, user_id=user_id, specialty_id=specialty_id)
    if existing:
        return existing, False

    get_user_or_404(db, user_id)
    if not db.get(Specialty, specialty_id):
        raise NotFoundError("Specialty not found")

    user_specialty = UserSpecialty(
        user_id=user_id,
        specialty_id=specialty_id,
        status=UserSpecialtyStatus.IN_PROGRESS,
    )
    db.add(user_specialty)
    db.flush()
    return user_specialty, True


def list_user_specialties(db: Session, *, user_id: uuid.UUID) -> list[UserSpecialty]:
    return list(
        db.scalars(
            select(UserSpecialty)
            .options(selectinload(UserSpecialty.specialty))
            .where(UserSpecialty.user_id == user_id)
            .order_by(UserSpecialty.created_at)
        ).all()
    )


"""
요구사항 진행 조회

- identifier 가 UUID 형식이면 특기 ID, 아니면 클래스 이름(AMIGO ~ GUIA)으로 해석
- 둘 다 아니면 ValueError
- 회원이 아직 답하지 않은 요구사항은 결과에 포함되지 않음

"""
def get_user_requirements(db: Session, *, user_id: uuid.UUID, identifier: str) -> list[UserRequirement]:
    stmt = (
        select(UserRequirement)
        .join(Requirement, UserRequirement.requirement_id == Requirement.id)
        .options(selectinload(UserRequirement.requirement))
        .where(UserRequirement.user_id == user_id)
    )

    try:
        specialty_id = uuid.UUID(identifier)
    except ValueError:
        specialty_id = None

    if specialty_id is not None:
        stmt = stmt.where(Requirement.specialty_id == specialty_id)
    else:
        try:
            dbv_class = DbvClass(identifier.upper())
        except ValueError:
            raise ValueError("identifier must be a specialty id or a class name")
        stmt = stmt.where(Requirement.dbv_class == dbv_class)

    stmt = stmt.order_by(Requirement.position, Requirement.description)
    return list(db.scalars(stmt).all())
