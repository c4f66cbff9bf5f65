# tests/helpers.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from dbvclub.core.security import create_access_token
from dbvclub.models.club import Club
from dbvclub.models.notification import Notification
from dbvclub.models.points import PointsHistory
from dbvclub.models.specialty import (
    Requirement,
    RequirementStatus,
    Specialty,
    UserRequirement,
    UserSpecialty,
    UserSpecialtyStatus,
)
from dbvclub.models.user import User, Role, DbvClass


def auth_header(user: User) -> dict:
    token = create_access_token(str(user.id))
    return {"Authorization": f"Bearer {token}"}


def create_club(db: Session, *, name: str = "Clube Órion") -> Club:
    club = Club(name=name, region="Sul", district="Centro")
    db.add(club)
    db.commit()
    db.refresh(club)
    return club


def create_user_in_db(
    db: Session,
    *,
    role: Role = Role.PATHFINDER,
    club: Club | None = None,
    name: str | None = None,
    dbv_class: DbvClass | None = None,
) -> User:
    user = User(
        email=f"user_{uuid.uuid4().hex[:8]}@test.com",
        name=name or f"{role.value.title()} {uuid.uuid4().hex[:4]}",
        role=role,
        club_id=club.id if club else None,
        dbv_class=dbv_class,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_specialty_in_db(db: Session, *, name: str | None = None, requirement_count: int = 2) -> Specialty:
    specialty = Specialty(name=name or f"Especialidade {uuid.uuid4().hex[:6]}", area="Natureza")
    specialty.requirements = [
        Requirement(description=f"Requisito {i + 1}", position=i)
        for i in range(requirement_count)
    ]
    db.add(specialty)
    db.commit()
    db.refresh(specialty)
    return specialty


def create_class_requirements(db: Session, *, dbv_class: DbvClass = DbvClass.AMIGO, count: int = 4) -> list[Requirement]:
    requirements = [
        Requirement(dbv_class=dbv_class, code=f"{i + 1}", description=f"{dbv_class.value} requisito {i + 1}", position=i)
        for i in range(count)
    ]
    db.add_all(requirements)
    db.commit()
    for r in requirements:
        db.refresh(r)
    return requirements


def add_user_requirement(
    db: Session,
    *,
    user: User,
    requirement: Requirement,
    status: RequirementStatus,
    completed_at: datetime | None = None,
) -> UserRequirement:
    row = UserRequirement(
        user_id=user.id,
        requirement_id=requirement.id,
        status=status,
        answer_text="resposta",
        completed_at=completed_at or datetime.now(timezone.utc),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_user_specialty(
    db: Session,
    *,
    user: User,
    specialty: Specialty,
    status: UserSpecialtyStatus = UserSpecialtyStatus.IN_PROGRESS,
) -> UserSpecialty:
    row = UserSpecialty(user_id=user.id, specialty_id=specialty.id, status=status)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_user(db: Session, user_id) -> User:
    db.expire_all()
    return db.scalar(select(User).where(User.id == user_id))


def ledger_entries(db: Session, user_id) -> list[PointsHistory]:
    db.expire_all()
    return list(
        db.scalars(
            select(PointsHistory)
            .where(PointsHistory.user_id == user_id)
            .order_by(PointsHistory.created_at)
        ).all()
    )


def notifications_for(db: Session, user_id, *, title: str | None = None) -> list[Notification]:
    db.expire_all()
    stmt = select(Notification).where(Notification.user_id == user_id)
    if title is not None:
        stmt = stmt.where(Notification.title == title)
    return list(db.scalars(stmt).all())


def count_rows(db: Session, model) -> int:
    db.expire_all()
    return db.scalar(select(func.count()).select_from(model))
