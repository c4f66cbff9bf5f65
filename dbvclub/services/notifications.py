"""
services/notifications.py

회원 알림함(Notification) 서비스.

특기 승인 대기, 클래스 보너스, 특기 최종 승인 등
진행 엔진에서 발생하는 사건을 회원 알림함에 기록한다.

설계 원칙:
- send        : 세션에 알림을 추가만 함 (commit은 호출 측)
- send_safely : 이미 확정(commit)된 상태 변경 뒤에 호출하는 best-effort 전송
                실패해도 예외를 올리지 않고 롤백 + 로그만 남김
- 조회/읽음 처리는 항상 본인 알림만 대상

"""

import uuid

import structlog
from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from dbvclub.core.errors import NotFoundError
from dbvclub.models.notification import Notification, NotificationType

logger = structlog.get_logger(__name__)

INBOX_LIMIT = 20


def send(
    db: Session,
    *,
    user_id: uuid.UUID,
    title: str,
    message: str,
    type_: NotificationType = NotificationType.INFO,
) -> Notification:
    notification = Notification(user_id=user_id, title=title, message=message, type=type_)
    db.add(notification)
    db.flush()
    return notification


def send_safely(
    db: Session,
    *,
    user_id: uuid.UUID,
    title: str,
    message: str,
    type_: NotificationType = NotificationType.INFO,
) -> Notification | None:
    try:
        notification = send(db, user_id=user_id, title=title, message=message, type_=type_)
        db.commit()
        return notification
    except Exception:
        db.rollback()
        logger.warning("notification_send_failed", user_id=str(user_id), title=title, exc_info=True)
        return None


# 최신순 알림 목록 (최대 INBOX_LIMIT 건)
def list_for_user(db: Session, *, user_id: uuid.UUID) -> list[Notification]:
    return list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(INBOX_LIMIT)
        ).all()
    )


def unread_count(db: Session, *, user_id: uuid.UUID) -> int:
    return db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    ) or 0


def mark_as_read(db: Session, *, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
    notification = db.scalar(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    if not notification:
        raise NotFoundError("Notification not found")

    notification.read = True
    db.flush()
    return notification


def mark_all_as_read(db: Session, *, user_id: uuid.UUID) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    return result.rowcount or 0
