from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from dbvclub.models.points import PointsSource
from dbvclub.models.user import Role, DbvClass


# 🔹 클럽 요약
class ClubBrief(BaseModel):
    id: UUID
    name: str
    region: Optional[str]
    district: Optional[str]

    model_config = ConfigDict(from_attributes=True)


# 🔹 내 프로필 응답
class ProfileResponse(BaseModel):
    id: UUID
    email: str
    name: str
    photo_url: Optional[str]
    role: Role
    dbv_class: Optional[DbvClass]
    points: int
    last_class_milestone: int
    club: Optional[ClubBrief]

    model_config = ConfigDict(from_attributes=True)


# 🔹 포인트 원장 한 줄
class PointsHistoryResponse(BaseModel):
    id: UUID
    amount: int
    reason: str
    source: PointsSource
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MyPointsResponse(BaseModel):
    points: int
    ledger_total: int
    history: List[PointsHistoryResponse] = []
