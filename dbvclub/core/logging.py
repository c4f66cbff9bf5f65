"""
logging.py

structlog 기반 구조화 로그 설정.

- LOG_FORMAT=json 이면 JSON 한 줄 로그, 그 외에는 콘솔 렌더러 사용
- 서버 시작 시 main.py에서 한 번만 호출
- 각 모듈은 structlog.get_logger(__name__)으로 로거를 얻어 사용

"""

import logging

import structlog

from dbvclub.core.config import Settings


def setup_logging(settings: Settings) -> None:
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    # 콘솔 렌더러는 예외를 직접 출력하므로 format_exc_info 는 JSON 에서만 사용
    if settings.LOG_FORMAT == "json":
        processors = shared + [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors = shared + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
