"""
services/reports.py

클럽 단위 특기 진행 현황 조회 (읽기 전용).

- dashboard_for_club : 특기별 회원 진행률 / 상태 + 회원별 진행 중 특기 수
- pending_for_club   : 심사 대기 요구사항(PENDING) + 최종 승인 대기 특기(WAITING_APPROVAL)

두 함수 모두 상태를 변경하지 않는다.

"""

import uuid
from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload

from dbvclub.models.specialty import (
    Requirement,
    RequirementStatus,
    Specialty,
    UserRequirement,
    UserSpecialty,
    UserSpecialtyStatus,
)
from dbvclub.models.user import User
from dbvclub.services.progress import progress_percent


def _member_status(join_status: UserSpecialtyStatus | None, progress: int) -> str:
    # 배정 row 가 있으면 그 상태, 없으면 진행 여부로 추정
    if join_status is not None:
        return join_status.value
    return UserSpecialtyStatus.IN_PROGRESS.value if progress > 0 else "PENDING"


"""
클럽 대시보드 집계

- 클럽 회원 중 한 명이라도 배정(UserSpecialty)되었거나 답변(UserRequirement)한 특기만 포함
- 회원 진행률 = 승인된 요구사항 수 / 특기 전체 요구사항 수 (반올림 %)
- all_users: 클럽 전체 회원과 참여 특기 수 (배정 또는 답변한 특기, COMPLETED 포함)

"""
def dashboard_for_club(db: Session, *, club_id: uuid.UUID) -> dict:
    members = db.scalars(
        select(User).where(User.club_id == club_id).order_by(User.name)
    ).all()
    if not members:
        return {"specialties": [], "all_users": []}
    member_ids = [m.id for m in members]

    join_status: dict[tuple[uuid.UUID, uuid.UUID], UserSpecialtyStatus] = {}
    for row in db.scalars(select(UserSpecialty).where(UserSpecialty.user_id.in_(member_ids))).all():
        join_status[(row.user_id, row.specialty_id)] = row.status

    touched: set[tuple[uuid.UUID, uuid.UUID]] = set()
    approved: dict[tuple[uuid.UUID, uuid.UUID], int] = defaultdict(int)
    answered = db.execute(
        select(UserRequirement.user_id, UserRequirement.status, Requirement.specialty_id)
        .join(Requirement, UserRequirement.requirement_id == Requirement.id)
        .where(
            UserRequirement.user_id.in_(member_ids),
            Requirement.specialty_id.is_not(None),
        )
    ).all()
    for user_id, status, specialty_id in answered:
        key = (user_id, specialty_id)
        touched.add(key)
        if status == RequirementStatus.APPROVED:
            approved[key] += 1

    active_ids = {sid for _, sid in join_status} | {sid for _, sid in touched}

    specialties_out = []
    if active_ids:
        totals = dict(
            db.execute(
                select(Requirement.specialty_id, func.count())
                .where(Requirement.specialty_id.in_(active_ids))
                .group_by(Requirement.specialty_id)
            ).all()
        )
        specialties = db.scalars(
            select(Specialty).where(Specialty.id.in_(active_ids)).order_by(Specialty.name)
        ).all()

        for specialty in specialties:
            total = totals.get(specialty.id, 0)
            rows = []
            for member in members:
                key = (member.id, specialty.id)
                if key not in join_status and key not in touched:
                    continue
                progress = progress_percent(approved.get(key, 0), total)
                rows.append({
                    "id": member.id,
                    "name": member.name,
                    "photo_url": member.photo_url,
                    "progress": progress,
                    "status": _member_status(join_status.get(key), progress),
                    "rank": member.role,
                })
            specialties_out.append({
                "id": specialty.id,
                "name": specialty.name,
                "area": specialty.area,
                "image_url": specialty.image_url,
                "total_requirements": total,
                "members": rows,
            })

    active_count: dict[uuid.UUID, int] = defaultdict(int)
    for user_id, _ in set(join_status) | touched:
        active_count[user_id] += 1

    all_users = [
        {
            "id": m.id,
            "name": m.name,
            "photo_url": m.photo_url,
            "role": m.role,
            "active_specialties_count": active_count.get(m.id, 0),
        }
        for m in members
    ]

    return {"specialties": specialties_out, "all_users": all_users}


"""
심사 대기 목록

- requirements : PENDING 요구사항 답변, 제출 시각(completed_at) 최신순
- specialties  : WAITING_APPROVAL 특기, 생성 시각 최신순

"""
def pending_for_club(db: Session, *, club_id: uuid.UUID) -> dict:
    requirements = db.scalars(
        select(UserRequirement)
        .join(User, UserRequirement.user_id == User.id)
        .options(
            joinedload(UserRequirement.user),
            joinedload(UserRequirement.requirement).joinedload(Requirement.specialty),
        )
        .where(
            User.club_id == club_id,
            UserRequirement.status == RequirementStatus.PENDING,
        )
        .order_by(UserRequirement.completed_at.desc())
    ).all()

    specialties = db.scalars(
        select(UserSpecialty)
        .join(User, UserSpecialty.user_id == User.id)
        .options(
            joinedload(UserSpecialty.user),
            joinedload(UserSpecialty.specialty),
        )
        .where(
            User.club_id == club_id,
            UserSpecialty.status == UserSpecialtyStatus.WAITING_APPROVAL,
        )
        .order_by(UserSpecialty.created_at.desc())
    ).all()

    return {"requirements": list(requirements), "specialties": list(specialties)}
