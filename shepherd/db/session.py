"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

FastAPI 의존성(get_db)을 통해
요청 단위로 세션을 생성/종료하는 구조를 지원한다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 세션 생성/종료 책임을 명확히 분리
- pool_pre_ping=True로 유휴 연결 오류 방지

관련 파일:
- shepherd.core.config        : DATABASE_URL 설정
- shepherd.core.deps          : get_db 의존성

"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from shepherd.core.config import settings


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


# pysqlite 는 기본적으로 BEGIN 을 늦게 보내 SAVEPOINT(begin_nested)가 동작하지 않음
# 드라이버의 트랜잭션 처리를 끄고 BEGIN 을 직접 보냄 (가져오기의 행 단위 savepoint 용)
def enable_sqlite_savepoints(target: Engine) -> None:
    @event.listens_for(target, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# 로컬 개발용 SQLite는 요청 스레드가 달라도 같은 커넥션을 쓸 수 있어야 함
connect_args = {"check_same_thread": False} if is_sqlite(settings.DATABASE_URL) else {}

# pool_pre_ping=True:
#   장시간 idle 후 끊어진 DB 커넥션을 자동으로 감지/재연결
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)
if is_sqlite(settings.DATABASE_URL):
    enable_sqlite_savepoints(engine)

# 요청 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
