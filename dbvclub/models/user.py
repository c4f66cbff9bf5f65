"""
user.py

사용자(User) / 권한(Role) / 클래스(DbvClass) 모델 정의 파일.

이 파일은 클럽 회원의 기본 정보와 조직 내 직책(Role),
소속 클럽, 진행 중인 클래스, 누적 포인트 및
클래스 진행률 마일스톤 워터마크를 관리한다.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dbvclub.db.base import Base


"""
사용자 직책(Role) 정의

- MASTER       : 시스템 전체 관리자 (특기 카탈로그 관리)
- OWNER        : 클럽 소유자
- ADMIN        : 클럽 관리자
- DIRECTOR     : 클럽 디렉터
- INSTRUCTOR   : 강사
- COUNSELOR    : 카운슬러
- PARENT       : 보호자
- PATHFINDER   : 일반 회원(대원)

"""

class Role(str, Enum):
    MASTER = "MASTER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    DIRECTOR = "DIRECTOR"
    INSTRUCTOR = "INSTRUCTOR"
    COUNSELOR = "COUNSELOR"
    PARENT = "PARENT"
    PATHFINDER = "PATHFINDER"


# 요구사항/특기 심사가 가능한 클럽 스태프
STAFF_ROLES = {Role.OWNER, Role.ADMIN, Role.DIRECTOR, Role.INSTRUCTOR, Role.COUNSELOR}

# 특기 최종 승인 대기 알림을 받는 직책
CLUB_ADMIN_ROLES = {Role.OWNER, Role.ADMIN, Role.INSTRUCTOR}


# 클래스 커리큘럼
class DbvClass(str, Enum):
    AMIGO = "AMIGO"
    COMPANHEIRO = "COMPANHEIRO"
    PESQUISADOR = "PESQUISADOR"
    PIONEIRO = "PIONEIRO"
    EXCURSIONISTA = "EXCURSIONISTA"
    GUIA = "GUIA"


"""
사용자(User) 모델

- email 은 고유 식별자
- club_id 는 선택 (클럽 미소속 사용자 허용)
- points 는 포인트 원장(PointsHistory) 합계의 비정규화 캐시
- last_class_milestone 은 이미 보상한 클래스 진행률(%) 최고치, 감소하지 않음

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    role: Mapped[Role] = mapped_column(SAEnum(Role, name="user_role"), nullable=False, default=Role.PATHFINDER)

    club_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clubs.id"), nullable=True, index=True
    )
    dbv_class: Mapped[DbvClass | None] = mapped_column(SAEnum(DbvClass, name="dbv_class"), nullable=True)

    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_class_milestone: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
        nullable=False,
    )

    club = relationship("Club", back_populates="members")
