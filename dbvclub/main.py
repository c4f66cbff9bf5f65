"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- 구조화 로그(structlog) 설정
- FastAPI 앱 인스턴스 생성
- CORS 미들웨어 / 전역 예외 핸들러 등록
- 각 도메인별 라우터(specialties, notifications, users) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임

관련 파일:
- dbvclub.core.config   : 환경 변수 및 설정 로드
- dbvclub.core.logging  : 로그 설정
- dbvclub.core.errors   : 예외 → HTTP 응답 변환
- dbvclub.routers.*     : 기능별 API 라우터

"""

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from dbvclub.core.config import settings
from dbvclub.core.deps import get_db
from dbvclub.core.errors import register_error_handlers
from dbvclub.core.logging import setup_logging
from dbvclub.routers import specialties, notifications, users

setup_logging(settings)

app = FastAPI(title="DBV Club Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(specialties.router)
app.include_router(notifications.router)
app.include_router(users.router)


@app.get("/health")
def health():
    return {"status": "ok"}


"""
데이터베이스 연결 상태 확인 엔드포인트

- SELECT 1 쿼리로 DB 연결 여부 확인
- 서버는 살아 있으나 DB가 죽은 상황을 분리해서 감지

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
