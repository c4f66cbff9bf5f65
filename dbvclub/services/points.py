"""
services/points.py

포인트 원장(PointsHistory) 서비스.

포인트 지급은 반드시 이 파일의 award_points를 통해서만 수행한다.
원장 한 줄 추가와 User.points 캐시 증가를 같은 세션(트랜잭션)에 올리며,
commit은 호출 측에서 수행한다.

설계 원칙:
- 원장은 append-only (수정/삭제 함수 없음)
- User.points 는 원장 합계의 캐시, 원장 합계가 기준 값

"""

import uuid

from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from dbvclub.models.points import PointsHistory, PointsSource
from dbvclub.models.user import User


def award_points(
    db: Session,
    *,
    user_id: uuid.UUID,
    amount: int,
    reason: str,
    source: PointsSource,
) -> PointsHistory:
    entry = PointsHistory(user_id=user_id, amount=amount, reason=reason, source=source)
    db.add(entry)

    # 읽고-더하고-쓰기 대신 DB 측 증가로 처리
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(points=User.points + amount)
    )
    db.flush()
    return entry


# 원장 기준 누적 포인트 합계
def ledger_total(db: Session, *, user_id: uuid.UUID) -> int:
    total = db.scalar(
        select(func.coalesce(func.sum(PointsHistory.amount), 0))
        .where(PointsHistory.user_id == user_id)
    )
    return int(total or 0)


def list_points_history(db: Session, *, user_id: uuid.UUID) -> list[PointsHistory]:
    return list(
        db.scalars(
            select(PointsHistory)
            .where(PointsHistory.user_id == user_id)
            .order_by(PointsHistory.created_at.desc())
        ).all()
    )
