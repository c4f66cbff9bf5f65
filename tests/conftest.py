import os

# 앱 import 전에 테스트용 설정 주입 (.env 없이도 실행 가능하도록)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_dbvclub.db")
os.environ.setdefault("TEST_DATABASE_URL", os.environ["DATABASE_URL"])
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from dbvclub.main import app as fastapi_app
from dbvclub.core.config import settings
from dbvclub.core.deps import get_db
from dbvclub.db.base import Base
from dbvclub.db.session import build_engine

# ✅ 모델 import (Base.metadata에 테이블 등록)
import dbvclub.models  # noqa: F401


TEST_DB_URL = settings.TEST_DATABASE_URL or os.getenv("TEST_DATABASE_URL")
if not TEST_DB_URL:
    raise RuntimeError("TEST_DATABASE_URL is not set. Add it to .env or env var for tests.")

engine = build_engine(TEST_DB_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """테스트 전체 시작/종료 때만 스키마 생성/삭제"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """각 테스트마다 데이터 초기화 (테이블은 유지, row만 삭제)"""
    # SQLite 에서도 동작하도록 FK 역순으로 DELETE
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def db():
    """테스트에서 직접 DB 조작할 때 쓰는 세션

    API 호출 이후 값을 확인할 때는 db.expire_all() 로 캐시를 비운 뒤 조회
    """
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
