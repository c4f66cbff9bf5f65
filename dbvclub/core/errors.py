"""
errors.py

도메인 예외 정의 및 전역 예외 핸들러 등록.

- NotFoundError : 존재하지 않는 회원/특기/요구사항 등을 참조한 경우 (404)
- 그 외 처리되지 않은 예외는 500 + unhandled_exception 로그

서비스 계층은 HTTP를 모르고 NotFoundError / ValueError만 발생시키며,
HTTP 상태 코드 변환은 이 파일과 라우터에서 담당한다.

"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class NotFoundError(LookupError):
    """참조 대상이 DB에 존재하지 않을 때 발생."""


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
