"""
notifications.py

회원 알림함 API.

- 최신 20건 조회 / 안 읽은 알림 수
- 단건 읽음 처리 (본인 알림만, 아니면 404) / 전체 읽음 처리
- /read-all 은 /{notification_id}/read 보다 먼저 선언

"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dbvclub.core.deps import get_current_user, get_db
from dbvclub.models.user import User
from dbvclub.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from dbvclub.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def inbox(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notifications.list_for_user(db, user_id=current_user.id)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"count": notifications.unread_count(db, user_id=current_user.id)}


@router.patch("/read-all", response_model=MarkAllReadResponse)
def read_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        updated = notifications.mark_all_as_read(db, user_id=current_user.id)
        db.commit()
        return {"updated": updated}
    except Exception:
        db.rollback()
        raise


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def read_one(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        notification = notifications.mark_as_read(
            db, user_id=current_user.id, notification_id=notification_id
        )
        db.commit()
        db.refresh(notification)
        return notification
    except Exception:
        db.rollback()
        raise
