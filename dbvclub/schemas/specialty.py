import uuid
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict

from dbvclub.models.specialty import RequirementStatus, RequirementType, UserSpecialtyStatus
from dbvclub.models.user import DbvClass, Role


# ---------- 카탈로그 ----------

class RequirementCreate(BaseModel):
    description: str = Field(..., min_length=1, examples=["Identificar 10 aves da região"])
    type: RequirementType = RequirementType.TEXT


class SpecialtyCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150, examples=["Aves"])
    area: str = Field("Geral", min_length=1, max_length=80, examples=["Natureza"])
    image_url: Optional[str] = Field(None, max_length=500)
    requirements: List[RequirementCreate] = []


# requirements 가 주어지면 기존 요구사항 전체 교체
class SpecialtyUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    area: Optional[str] = Field(None, min_length=1, max_length=80)
    image_url: Optional[str] = Field(None, max_length=500)
    requirements: Optional[List[RequirementCreate]] = None


class RequirementResponse(BaseModel):
    id: uuid.UUID
    specialty_id: Optional[uuid.UUID]
    dbv_class: Optional[DbvClass]
    code: Optional[str]
    area: Optional[str]
    description: str
    type: RequirementType
    position: int

    model_config = ConfigDict(from_attributes=True)


class SpecialtySummary(BaseModel):
    id: uuid.UUID
    name: str
    area: str
    image_url: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class SpecialtyResponse(SpecialtySummary):
    created_at: datetime
    requirements: List[RequirementResponse] = []


# ---------- 진행 상태 ----------

class SubmitAnswerRequest(BaseModel):
    requirement_id: uuid.UUID
    text: Optional[str] = None
    file_url: Optional[str] = Field(None, max_length=500)


class UserRequirementResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    requirement_id: uuid.UUID
    status: RequirementStatus
    answer_text: Optional[str]
    answer_file_url: Optional[str]
    completed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class UserRequirementDetail(UserRequirementResponse):
    requirement: RequirementResponse


class UserSpecialtyResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    specialty_id: uuid.UUID
    status: UserSpecialtyStatus
    awarded_at: Optional[datetime]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSpecialtyDetail(UserSpecialtyResponse):
    specialty: SpecialtySummary


# ---------- 심사 대기 (pending) ----------

class MemberBrief(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    photo_url: Optional[str]
    role: Role
    club_id: Optional[uuid.UUID]

    model_config = ConfigDict(from_attributes=True)


class RequirementWithSpecialty(RequirementResponse):
    specialty: Optional[SpecialtySummary]


class PendingRequirementItem(UserRequirementResponse):
    user: MemberBrief
    requirement: RequirementWithSpecialty


class PendingSpecialtyItem(UserSpecialtyResponse):
    user: MemberBrief
    specialty: SpecialtySummary


class PendingResponse(BaseModel):
    requirements: List[PendingRequirementItem] = []
    specialties: List[PendingSpecialtyItem] = []


# ---------- 클럽 대시보드 ----------

class DashboardMember(BaseModel):
    id: uuid.UUID
    name: str
    photo_url: Optional[str]
    progress: int
    status: str
    rank: Role


class DashboardSpecialty(BaseModel):
    id: uuid.UUID
    name: str
    area: str
    image_url: Optional[str]
    total_requirements: int
    members: List[DashboardMember] = []


class DashboardUser(BaseModel):
    id: uuid.UUID
    name: str
    photo_url: Optional[str]
    role: Role
    active_specialties_count: int


class DashboardResponse(BaseModel):
    specialties: List[DashboardSpecialty] = []
    all_users: List[DashboardUser] = []
