from typing import Generator
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from sqlalchemy import select

from dbvclub.core.security import decode_access_token
from dbvclub.db.session import SessionLocal
from dbvclub.models.user import User, Role, STAFF_ROLES

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(decode_access_token(cred.credentials))
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.scalar(select(User).where(User.id == user_id, User.is_active.is_(True)))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def is_staff(user: User) -> bool:
    return user.role == Role.MASTER or user.role in STAFF_ROLES


def require_roles(*roles: Role):
    allowed = set(roles)

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(sorted(r.value for r in allowed))}",
            )
        return current_user
    return _checker


get_current_staff = require_roles(Role.MASTER, *STAFF_ROLES)
get_current_master = require_roles(Role.MASTER)


"""
클럽 경계 검사

- MASTER는 모든 클럽 회원에 접근 가능
- 그 외 스태프는 자기 클럽 소속 회원에게만 접근 가능

"""

def ensure_same_club(actor: User, target: User) -> None:
    if actor.role == Role.MASTER:
        return
    if actor.club_id is None or actor.club_id != target.club_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User belongs to another club")
