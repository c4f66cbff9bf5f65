"""

points.py

포인트 원장(PointsHistory) 모델 정의 파일.

포인트가 지급될 때마다 한 줄씩 추가되는 append-only 원장이다.
User.points 는 이 원장 합계의 비정규화 캐시이며,
원장 추가와 캐시 증가는 항상 같은 트랜잭션에서 수행한다.

설계 원칙:
- 원장 데이터는 수정/삭제하지 않는 것을 전제로 설계
- source 로 지급 출처(요구사항/특기 등)를 구분

"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dbvclub.db.base import Base


#  포인트 지급 출처 Enum

class PointsSource(str, Enum):
    REQUIREMENT = "REQUIREMENT"
    SPECIALTY = "SPECIALTY"


class PointsHistory(Base):
    __tablename__ = "points_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    source: Mapped[PointsSource] = mapped_column(SAEnum(PointsSource, name="points_source"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
