"""
security.py

JWT Access Token 생성/검증을 담당하는 보안 유틸리티 모음.

로그인/회원가입 흐름은 이 서비스 범위 밖이며,
이 파일은 요청에 실린 Bearer 토큰을 발급/해석하는 저수준 기능만 제공한다.

주요 기능:
- JWT Access Token 생성 (초기 계정 스크립트, 테스트에서 사용)
- Access Token 디코딩 및 subject(user_id) 추출

설계 원칙:
- 토큰 타입(type=access)을 payload에 명시
- 시간 기반(exp) 만료는 UTC 기준으로 처리

관련 파일:
- dbvclub.core.config    : JWT 시크릿 키 및 만료 설정
- dbvclub.core.deps      : 토큰을 실제로 검증하는 인증 의존성

"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from dbvclub.core.config import settings


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": subject,
        "type": "access",
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


"""
Access Token 디코딩 함수

- 서명 / 만료 검증
- access 타입이 아니거나 sub가 없으면 JWTError 발생
- subject(user_id) 문자열 반환

"""

def decode_access_token(token: str) -> str:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") and payload.get("type") != "access":
        raise JWTError("Not an access token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    return sub
