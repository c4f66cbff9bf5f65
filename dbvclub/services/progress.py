"""
services/progress.py

요구사항 판정 / 답변 제출 / 보상 연쇄 처리 (진행 엔진).

이 파일은 회원의 요구사항 답변과 관리자 판정을 기록하고,
판정 이후의 보상 연쇄(특기 완료 대기 전환, 클래스 진행률 보너스),
그리고 특기 최종 승인(250 포인트)을 담당한다.

주요 기능:
- submit_answer            : 답변 제출, 항상 PENDING 으로 초기화
- set_requirement_status   : 관리자 판정 (APPROVED 시 completed_at 기록)
- run_approval_side_effects: 판정 commit 이후 두 검사를 각각 독립적으로 실행
- check_specialty_completion : 특기 요구사항 전부 승인 시 WAITING_APPROVAL 전환
- check_class_completion     : 25/50/75/100% 도달 시 100/200/300/1000 포인트
- approve_specialty          : 특기 최종 승인 (멱등)

설계 원칙:
- 판정/제출/승인 같은 1차 상태 변경은 라우터에서 commit
- 보상 연쇄와 알림은 commit 이후 best-effort
  실패 시 해당 단계만 롤백 + 로그, 1차 결과에는 영향 없음
- 클래스 마일스톤 워터마크는 조건부 UPDATE(compare-and-swap)로만 올림
  동시에 같은 구간을 넘긴 요청이 있으면 한쪽만 보상
- WAITING_APPROVAL 은 자동으로 COMPLETED 가 되지 않음 (관리자 승인 필수)

관련 파일:
- dbvclub.services.points        : 포인트 원장
- dbvclub.services.notifications : 알림 전송
- dbvclub.routers.specialties

"""

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from dbvclub.core.errors import NotFoundError
from dbvclub.models.notification import NotificationType
from dbvclub.models.points import PointsSource
from dbvclub.models.specialty import (
    Requirement,
    RequirementStatus,
    Specialty,
    UserRequirement,
    UserSpecialty,
    UserSpecialtyStatus,
)
from dbvclub.models.user import User, CLUB_ADMIN_ROLES
from dbvclub.services import notifications
from dbvclub.services.points import award_points
from dbvclub.services.specialties import get_user_or_404, get_user_specialty

logger = structlog.get_logger(__name__)

# (진행률 %, 보너스 포인트)
CLASS_MILESTONES = ((25, 100), (50, 200), (75, 300), (100, 1000))

SPECIALTY_AWARD_POINTS = 250


def _now() -> datetime:
    return datetime.now(timezone.utc)


def progress_percent(approved: int, total: int) -> int:
    """승인 비율을 0~100 정수 퍼센트로 (0.5 는 올림)."""
    if total <= 0:
        return 0
    return (approved * 200 + total) // (2 * total)


def milestone_bonus(percentage: int, last_milestone: int) -> tuple[int, int]:
    """새로 넘은 구간들의 보너스 합계와 새 워터마크.

    한 번에 여러 구간을 넘으면 해당 보너스를 모두 합산한다.
    (예: 0% → 80% 는 100 + 200 + 300 = 600, 워터마크 75)
    """
    bonus = 0
    milestone = last_milestone
    for threshold, points in CLASS_MILESTONES:
        if percentage >= threshold and last_milestone < threshold:
            bonus += points
            milestone = max(milestone, threshold)
    return bonus, milestone


def _get_requirement_or_404(db: Session, requirement_id: uuid.UUID) -> Requirement:
    requirement = db.get(Requirement, requirement_id)
    if not requirement:
        raise NotFoundError("Requirement not found")
    return requirement


def _get_user_requirement(db: Session, *, user_id: uuid.UUID, requirement_id: uuid.UUID) -> UserRequirement | None:
    return db.scalar(
        select(UserRequirement).where(
            UserRequirement.user_id == user_id,
            UserRequirement.requirement_id == requirement_id,
        )
    )


"""
답변 제출

- 이전 판정(APPROVED / REJECTED)과 무관하게 항상 PENDING 으로 초기화
- 답변 내용(text, file_url)은 이번 제출 값으로 덮어씀
- completed_at 은 제출 시각

"""
def submit_answer(
    db: Session,
    *,
    user_id: uuid.UUID,
    requirement_id: uuid.UUID,
    text: str | None,
    file_url: str | None,
) -> UserRequirement:
    _get_requirement_or_404(db, requirement_id)

    user_requirement = _get_user_requirement(db, user_id=user_id, requirement_id=requirement_id)
    if user_requirement is None:
        user_requirement = UserRequirement(user_id=user_id, requirement_id=requirement_id)
        db.add(user_requirement)

    user_requirement.status = RequirementStatus.PENDING
    user_requirement.answer_text = text
    user_requirement.answer_file_url = file_url
    user_requirement.completed_at = _now()

    db.flush()
    return user_requirement


"""
요구사항 판정 (1차 상태 변경)

- APPROVED 이면 completed_at = 현재 시각, 그 외에는 None
- 답변 내용은 그대로 유지
- 보상 연쇄는 commit 이후 run_approval_side_effects 에서 처리

"""
def set_requirement_status(
    db: Session,
    *,
    user_id: uuid.UUID,
    requirement_id: uuid.UUID,
    status: RequirementStatus,
) -> UserRequirement:
    _get_requirement_or_404(db, requirement_id)
    get_user_or_404(db, user_id)

    user_requirement = _get_user_requirement(db, user_id=user_id, requirement_id=requirement_id)
    if user_requirement is None:
        user_requirement = UserRequirement(user_id=user_id, requirement_id=requirement_id)
        db.add(user_requirement)

    user_requirement.status = status
    user_requirement.completed_at = _now() if status == RequirementStatus.APPROVED else None

    db.flush()
    return user_requirement


def run_approval_side_effects(db: Session, *, user_id: uuid.UUID, requirement_id: uuid.UUID) -> None:
    """승인 commit 이후 실행. 각 검사는 서로 독립적으로 시도된다."""
    checks = (
        ("specialty_completion", check_specialty_completion),
        ("class_completion", check_class_completion),
    )
    for name, check in checks:
        try:
            check(db, user_id=user_id, requirement_id=requirement_id)
        except Exception:
            db.rollback()
            logger.error(
                "approval_side_effect_failed",
                check=name,
                user_id=str(user_id),
                requirement_id=str(requirement_id),
                exc_info=True,
            )


"""
특기 완료 검사

- 요구사항이 특기 소속이 아니면 아무것도 하지 않음
- 해당 특기의 요구사항이 전부 APPROVED 이면 UserSpecialty 를 WAITING_APPROVAL 로
- 이미 WAITING_APPROVAL / COMPLETED 이면 변경 없음 (알림 중복 방지)
- 전환 후 클럽 관리자(OWNER / ADMIN / INSTRUCTOR)에게 알림
- 반환값: 이번 호출에서 전환했는지 여부

"""
def check_specialty_completion(db: Session, *, user_id: uuid.UUID, requirement_id: uuid.UUID) -> bool:
    requirement = db.get(Requirement, requirement_id)
    if requirement is None or requirement.specialty_id is None:
        return False
    specialty_id = requirement.specialty_id

    requirement_ids = set(
        db.scalars(select(Requirement.id).where(Requirement.specialty_id == specialty_id)).all()
    )
    approved_ids = set(
        db.scalars(
            select(UserRequirement.requirement_id)
            .join(Requirement, UserRequirement.requirement_id == Requirement.id)
            .where(
                UserRequirement.user_id == user_id,
                UserRequirement.status == RequirementStatus.APPROVED,
                Requirement.specialty_id == specialty_id,
            )
        ).all()
    )
    if not requirement_ids or not requirement_ids <= approved_ids:
        return False

    user_specialty = get_user_specialty(db, user_id=user_id, specialty_id=specialty_id)
    if user_specialty and user_specialty.status in (
        UserSpecialtyStatus.WAITING_APPROVAL,
        UserSpecialtyStatus.COMPLETED,
    ):
        return False

    if user_specialty is None:
        user_specialty = UserSpecialty(user_id=user_id, specialty_id=specialty_id)
        db.add(user_specialty)
    user_specialty.status = UserSpecialtyStatus.WAITING_APPROVAL

    db.commit()
    logger.info("specialty_waiting_approval", user_id=str(user_id), specialty_id=str(specialty_id))

    _notify_club_admins(db, user_id=user_id, specialty_id=specialty_id)
    return True


def _notify_club_admins(db: Session, *, user_id: uuid.UUID, specialty_id: uuid.UUID) -> None:
    user = db.get(User, user_id)
    specialty = db.get(Specialty, specialty_id)
    if user is None or specialty is None or user.club_id is None:
        return

    admins = db.scalars(
        select(User).where(
            User.club_id == user.club_id,
            User.role.in_(CLUB_ADMIN_ROLES),
            User.is_active.is_(True),
        )
    ).all()

    member_name = user.name
    specialty_name = specialty.name
    for admin in admins:
        notifications.send_safely(
            db,
            user_id=admin.id,
            title="Specialty awaiting approval",
            message=f"{member_name} completed every requirement of {specialty_name}. Review and award it.",
            type_=NotificationType.INFO,
        )


"""
클래스 진행률 검사

- 요구사항이 클래스 커리큘럼 소속이 아니면 아무것도 하지 않음
- 해당 클래스 요구사항 중 승인 비율을 반올림한 % 로 계산
- 워터마크(last_class_milestone)보다 높은 구간을 새로 넘으면 보너스 합산 지급
- 워터마크는 읽은 값과 같을 때만 갱신 (조건부 UPDATE)
  갱신된 row 가 없으면 다른 요청이 먼저 올린 것이므로 최신 워터마크를 다시 읽고
  남은 구간만 다시 계산 (남은 보너스가 0 이면 지급하지 않음)
- 원장 한 줄 + 알림 한 건
- 반환값: 이번 호출에서 지급한 보너스 합계

"""
def check_class_completion(db: Session, *, user_id: uuid.UUID, requirement_id: uuid.UUID) -> int:
    requirement = db.get(Requirement, requirement_id)
    if requirement is None or requirement.dbv_class is None:
        return 0
    dbv_class = requirement.dbv_class

    total = db.scalar(
        select(func.count()).select_from(Requirement).where(Requirement.dbv_class == dbv_class)
    ) or 0
    if total == 0:
        return 0

    approved = db.scalar(
        select(func.count())
        .select_from(UserRequirement)
        .join(Requirement, UserRequirement.requirement_id == Requirement.id)
        .where(
            UserRequirement.user_id == user_id,
            UserRequirement.status == RequirementStatus.APPROVED,
            Requirement.dbv_class == dbv_class,
        )
    ) or 0

    percentage = progress_percent(approved, total)

    user = db.get(User, user_id)
    if user is None:
        return 0

    # 워터마크는 구간 수보다 많이 바뀔 수 없음
    for _ in range(len(CLASS_MILESTONES)):
        observed = user.last_class_milestone
        bonus, milestone = milestone_bonus(percentage, observed)
        if bonus == 0:
            return 0

        result = db.execute(
            update(User)
            .where(User.id == user_id, User.last_class_milestone == observed)
            .values(last_class_milestone=milestone)
        )
        if result.rowcount == 1:
            break

        # rollback 으로 user 가 expire 되어 다음 반복에서 최신 워터마크를 다시 읽음
        db.rollback()
        logger.warning(
            "class_milestone_race_lost",
            user_id=str(user_id),
            observed=observed,
            percentage=percentage,
        )
    else:
        return 0

    award_points(
        db,
        user_id=user_id,
        amount=bonus,
        reason=f"Class progress ({percentage}%)",
        source=PointsSource.REQUIREMENT,
    )
    db.commit()
    logger.info(
        "class_milestone_awarded",
        user_id=str(user_id),
        dbv_class=dbv_class.value,
        percentage=percentage,
        bonus=bonus,
        milestone=milestone,
    )

    notifications.send_safely(
        db,
        user_id=user_id,
        title="Class bonus!",
        message=f"You reached {percentage}% of your class and earned {bonus} points.",
        type_=NotificationType.SUCCESS,
    )
    return bonus


"""
특기 최종 승인

- 이미 COMPLETED 이면 기존 row 그대로 반환, 포인트/알림 없음
- 그 외에는 COMPLETED + awarded_at 기록, 250 포인트 원장 한 줄
- 기존 row 갱신은 "아직 COMPLETED 가 아닐 때만" 조건부 UPDATE
- 반환값: (UserSpecialty, 이번 호출에서 지급했는지 여부)
- commit / 알림(notify_specialty_awarded)은 라우터에서

"""
def approve_specialty(
    db: Session, *, user_id: uuid.UUID, specialty_id: uuid.UUID
) -> tuple[UserSpecialty, bool]:
    existing = get_user_specialty(db, user_id=user_id, specialty_id=specialty_id)
    if existing and existing.status == UserSpecialtyStatus.COMPLETED:
        return existing, False

    specialty = db.get(Specialty, specialty_id)
    if not specialty:
        raise NotFoundError("Specialty not found")
    get_user_or_404(db, user_id)

    awarded_at = _now()
    if existing is None:
        user_specialty = UserSpecialty(
            user_id=user_id,
            specialty_id=specialty_id,
            status=UserSpecialtyStatus.COMPLETED,
            awarded_at=awarded_at,
        )
        db.add(user_specialty)
        db.flush()
    else:
        result = db.execute(
            update(UserSpecialty)
            .where(
                UserSpecialty.id == existing.id,
                UserSpecialty.status != UserSpecialtyStatus.COMPLETED,
            )
            .values(status=UserSpecialtyStatus.COMPLETED, awarded_at=awarded_at)
        )
        db.refresh(existing)
        if result.rowcount == 0:
            return existing, False
        user_specialty = existing

    award_points(
        db,
        user_id=user_id,
        amount=SPECIALTY_AWARD_POINTS,
        reason=f"Specialty completed: {specialty.name}",
        source=PointsSource.SPECIALTY,
    )
    logger.info(
        "specialty_awarded",
        user_id=str(user_id),
        specialty_id=str(specialty_id),
        points=SPECIALTY_AWARD_POINTS,
    )
    return user_specialty, True


def notify_specialty_awarded(db: Session, *, user_id: uuid.UUID, specialty_id: uuid.UUID) -> None:
    specialty = db.get(Specialty, specialty_id)
    name = specialty.name if specialty else "specialty"
    notifications.send_safely(
        db,
        user_id=user_id,
        title="Specialty completed!",
        message=f"Congratulations! Your {name} specialty was approved. +{SPECIALTY_AWARD_POINTS} points.",
        type_=NotificationType.SUCCESS,
    )
