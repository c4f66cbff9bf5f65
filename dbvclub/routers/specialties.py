"""
specialties.py

특기(Specialty) / 요구사항 진행 API 모음.

주요 기능:
- 특기 카탈로그 조회 및 MASTER 전용 생성/수정/삭제
- 회원 답변 제출, 스태프의 요구사항 판정 / 특기 최종 승인 / 특기 배정
- 클럽 대시보드(JSON / CSV / Excel) 및 심사 대기 목록

설계 원칙:
- 비즈니스 로직은 service 계층(dbvclub.services.*)에 위임
- 1차 상태 변경은 이 라우터에서 commit, 응답 스냅샷을 먼저 만든 뒤
  보상 연쇄/알림(best-effort)을 실행
- 스태프는 자기 클럽 회원에 대해서만 판정/승인/배정 가능 (MASTER 제외)
- 고정 경로(/my, /pending, /dashboard ...)는 /{specialty_id} 보다 먼저 선언

관련 파일:
- dbvclub.services.specialties : 카탈로그 / 배정 / 조회
- dbvclub.services.progress    : 판정 / 답변 / 보상
- dbvclub.services.reports     : 대시보드 / 심사 대기
- dbvclub.schemas.specialty    : 요청/응답 스키마

"""

import csv
import io
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from openpyxl import Workbook
from sqlalchemy.orm import Session
from starlette.responses import Response, StreamingResponse

from dbvclub.core.deps import (
    ensure_same_club,
    get_current_master,
    get_current_staff,
    get_current_user,
    get_db,
    is_staff,
)
from dbvclub.models.specialty import RequirementStatus
from dbvclub.models.user import User
from dbvclub.schemas.specialty import (
    DashboardResponse,
    PendingResponse,
    SpecialtyCreateRequest,
    SpecialtyResponse,
    SpecialtyUpdateRequest,
    SubmitAnswerRequest,
    UserRequirementDetail,
    UserRequirementResponse,
    UserSpecialtyDetail,
    UserSpecialtyResponse,
)
from dbvclub.services import progress, reports
from dbvclub.services.specialties import (
    assign_specialty,
    create_specialty,
    delete_specialty,
    get_specialty,
    get_user_or_404,
    get_user_requirements,
    list_specialties,
    list_user_specialties,
    update_specialty,
)

router = APIRouter(prefix="/specialties", tags=["specialties"])

DASHBOARD_COLUMNS = ["specialty", "area", "member", "role", "progress", "status"]


def _ensure_can_view(actor: User, target: User) -> None:
    if actor.id == target.id:
        return
    if not is_staff(actor):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this member")
    ensure_same_club(actor, target)


def _dashboard_rows(dashboard: dict):
    for specialty in dashboard["specialties"]:
        for member in specialty["members"]:
            yield [
                specialty["name"],
                specialty["area"],
                member["name"],
                member["rank"].value,
                member["progress"],
                member["status"],
            ]


"""
특기 카탈로그 조회 / 생성

- 목록은 이름순, 각 특기의 요구사항은 position 순
- 생성은 MASTER 전용, 이름 중복 시 400

"""
@router.get("", response_model=list[SpecialtyResponse])
def list_all(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return list_specialties(db)


@router.post("", response_model=SpecialtyResponse, status_code=status.HTTP_201_CREATED)
def create(
    body: SpecialtyCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_master),
):
    try:
        specialty = create_specialty(
            db,
            name=body.name,
            area=body.area,
            image_url=body.image_url,
            requirements=[r.model_dump() for r in body.requirements],
        )
        db.commit()
        return get_specialty(db, specialty.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.get("/my", response_model=list[UserSpecialtyDetail])
def my_specialties(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_user_specialties(db, user_id=current_user.id)


@router.get("/user/{user_id}", response_model=list[UserSpecialtyDetail])
def member_specialties(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    target = get_user_or_404(db, user_id)
    _ensure_can_view(current_user, target)
    return list_user_specialties(db, user_id=user_id)


"""
심사 대기 목록 / 클럽 대시보드

- 스태프 본인의 클럽 기준
- 클럽 미소속이면 빈 결과

"""
@router.get("/pending", response_model=PendingResponse)
def pending(
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    if staff.club_id is None:
        return {"requirements": [], "specialties": []}
    return reports.pending_for_club(db, club_id=staff.club_id)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    if staff.club_id is None:
        return {"specialties": [], "all_users": []}
    return reports.dashboard_for_club(db, club_id=staff.club_id)


"""
클럽 대시보드 CSV 다운로드

- 특기 x 회원 한 줄씩 (specialty, area, member, role, progress, status)
- UTF-8 BOM 을 먼저 출력하여 Excel 에서 한글/포르투갈어가 깨지지 않도록 처리

"""
@router.get("/dashboard/export")
def export_dashboard_csv(
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    data = (
        reports.dashboard_for_club(db, club_id=staff.club_id)
        if staff.club_id is not None
        else {"specialties": [], "all_users": []}
    )

    def generate():
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(DASHBOARD_COLUMNS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in _dashboard_rows(data):
            writer.writerow(row)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    headers = {"Content-Disposition": 'attachment; filename="specialties_dashboard.csv"'}
    return StreamingResponse(generate(), media_type="text/csv; charset=utf-8", headers=headers)


@router.get("/dashboard/export.xlsx")
def export_dashboard_xlsx(
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    data = (
        reports.dashboard_for_club(db, club_id=staff.club_id)
        if staff.club_id is not None
        else {"specialties": [], "all_users": []}
    )

    wb = Workbook()
    ws = wb.active
    ws.title = "specialties_dashboard"

    ws.append(DASHBOARD_COLUMNS)
    for row in _dashboard_rows(data):
        ws.append(row)

    buf = io.BytesIO()
    wb.save(buf)

    headers = {"Content-Disposition": 'attachment; filename="specialties_dashboard.xlsx"'}
    return Response(
        content=buf.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


"""
답변 제출 API

- 로그인한 회원 본인의 답변만 제출
- 이전 판정과 무관하게 PENDING 으로 초기화
- 존재하지 않는 요구사항이면 404

"""
@router.post("/answer", response_model=UserRequirementResponse)
def submit_answer(
    body: SubmitAnswerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        user_requirement = progress.submit_answer(
            db,
            user_id=current_user.id,
            requirement_id=body.requirement_id,
            text=body.text,
            file_url=body.file_url,
        )
        db.commit()
        db.refresh(user_requirement)
        return user_requirement
    except Exception:
        db.rollback()
        raise


"""
요구사항 판정 API

- status: APPROVED / REJECTED / PENDING (그 외 값은 422)
- 판정 commit 후 응답 스냅샷을 만들고,
  APPROVED 인 경우에만 특기 완료 / 클래스 진행률 검사 실행 (실패해도 응답은 정상)

"""
@router.post("/requirement/{user_id}/{requirement_id}/{verdict}", response_model=UserRequirementResponse)
def set_requirement_verdict(
    user_id: uuid.UUID,
    requirement_id: uuid.UUID,
    verdict: RequirementStatus,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    try:
        target = get_user_or_404(db, user_id)
        ensure_same_club(staff, target)

        user_requirement = progress.set_requirement_status(
            db,
            user_id=user_id,
            requirement_id=requirement_id,
            status=verdict,
        )
        db.commit()
        db.refresh(user_requirement)
    except Exception:
        db.rollback()
        raise

    result = UserRequirementResponse.model_validate(user_requirement)

    if verdict == RequirementStatus.APPROVED:
        progress.run_approval_side_effects(db, user_id=user_id, requirement_id=requirement_id)

    return result


"""
특기 최종 승인 API

- 이미 COMPLETED 이면 그대로 반환 (포인트 / 알림 없음)
- 그 외에는 COMPLETED + 250 포인트, commit 후 회원에게 알림

"""
@router.post("/award/{user_id}/{specialty_id}", response_model=UserSpecialtyResponse)
def award(
    user_id: uuid.UUID,
    specialty_id: uuid.UUID,
    db: Session = Depends(get_db),
    staff: User = Depends(get_current_staff),
):
    try:
        target = get_user_or_404(db, user_id)
        ensure_same_club(staff, target)

        user_specialty, awarded = progress.approve_specialty(
            db, user_id=user_id, specialty_id=specialty_id
        )
        db.commit()
        db.refresh(user_specialty)
    except Exception:
        db.rollback()
        raise

    result = UserSpecialtyResponse.model_validate(user_specialty)

    if awarded:
        progress.notify_specialty_awarded(db, user_id=user_id, specialty_id=specialty_id)

    return result


"""
특기 배정 API

- 스태프(같은 클럽) 또는 회원 본인
- 이미 배정되어 있으면 기존 상태 그대로 반환

"""
@router.post("/assign/{user_id}/{specialty_id}", response_model=UserSpecialtyResponse)
def assign(
    user_id: uuid.UUID,
    specialty_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        target = get_user_or_404(db, user_id)
        if current_user.id != target.id:
            if not is_staff(current_user):
                raise HTTPException(status_code=403, detail="Not allowed to assign specialties to this member")
            ensure_same_club(current_user, target)

        user_specialty, _ = assign_specialty(db, user_id=user_id, specialty_id=specialty_id)
        db.commit()
        db.refresh(user_specialty)
        return user_specialty
    except Exception:
        db.rollback()
        raise


"""
특기 단건 조회 / 수정 / 삭제

- 조회: 로그인 사용자 누구나
- 수정/삭제: MASTER 전용
- 삭제 시 요구사항, 회원 진행 상태도 함께 삭제

"""
@router.get("/{specialty_id}", response_model=SpecialtyResponse)
def get_one(
    specialty_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return get_specialty(db, specialty_id)


@router.get("/{identifier}/progress", response_model=list[UserRequirementDetail])
def requirement_progress(
    identifier: str,
    user_id: Optional[uuid.UUID] = Query(None, description="기본값: 본인"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    target_id = user_id or current_user.id
    if target_id != current_user.id:
        _ensure_can_view(current_user, get_user_or_404(db, target_id))

    try:
        return get_user_requirements(db, user_id=target_id, identifier=identifier)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{specialty_id}", response_model=SpecialtyResponse)
def update(
    specialty_id: uuid.UUID,
    body: SpecialtyUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_master),
):
    fields = body.model_dump(exclude_unset=True, exclude={"requirements"})
    requirements = (
        [r.model_dump() for r in body.requirements]
        if body.requirements is not None
        else None
    )
    try:
        update_specialty(db, specialty_id, fields=fields, requirements=requirements)
        db.commit()
        db.expire_all()
        return get_specialty(db, specialty_id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        raise


@router.delete("/{specialty_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    specialty_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_master),
):
    try:
        delete_specialty(db, specialty_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)
