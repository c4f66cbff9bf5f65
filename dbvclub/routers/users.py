"""
users.py

로그인한 회원 본인의 정보 조회 API 모음.

주요 기능:
- 본인 프로필 조회 (직책, 클럽, 클래스, 누적 포인트, 클래스 마일스톤)
- 본인 포인트 원장 조회 (원장 합계 포함)

설계 원칙:
- 로그인한 사용자 누구나 접근 가능, 항상 본인 정보만 반환
- points 는 캐시 값, ledger_total 은 원장 합계 (두 값이 같아야 정상)

관련 파일:
- dbvclub.services.points : 포인트 원장
- dbvclub.schemas.user    : 응답 스키마
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dbvclub.core.deps import get_current_user, get_db
from dbvclub.models.user import User
from dbvclub.schemas.user import ProfileResponse, MyPointsResponse
from dbvclub.services.points import ledger_total, list_points_history

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=ProfileResponse)
def profile(current_user: User = Depends(get_current_user)):
    return current_user


"""
본인 포인트 원장 조회 API

- 최신순 원장 목록
- points(캐시)와 ledger_total(원장 합계)을 함께 반환

"""
@router.get("/me/points", response_model=MyPointsResponse)
def my_points(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        "points": current_user.points,
        "ledger_total": ledger_total(db, user_id=current_user.id),
        "history": list_points_history(db, user_id=current_user.id),
    }
