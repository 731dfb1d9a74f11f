import os

# Settings() 는 import 시점에 생성되므로 앱 import 전에 기본값 지정
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shepherd.main import app as fastapi_app
from shepherd.core.config import settings
from shepherd.core.deps import get_db, get_identity_provider, get_message_gateway
from shepherd.db.base import Base
from shepherd.db.session import is_sqlite, enable_sqlite_savepoints
from shepherd.services.identity import IdentityProvider

# ✅ 모델 import (Base.metadata에 테이블 등록)
import shepherd.models  # noqa: F401

from tests.helpers import FakeGateway


# TEST_DATABASE_URL 이 없으면 메모리 SQLite 로 실행
TEST_DB_URL = settings.TEST_DATABASE_URL or "sqlite://"

if is_sqlite(TEST_DB_URL):
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
else:
    engine = create_engine(TEST_DB_URL, pool_pre_ping=True)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def db_session():
    """테스트 코드와 API 요청이 함께 쓰는 세션 (커넥션 하나를 공유하는 SQLite 대비)"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def identity():
    # URL / 키가 없으면 외부 호출 없이 로컬 id 생성
    return IdentityProvider(None, None)


@pytest.fixture()
def client(db_session, gateway, identity):
    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_message_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_identity_provider] = lambda: identity
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
