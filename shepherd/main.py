"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- 로깅 초기화 (LOG_LEVEL)
- FastAPI 앱 인스턴스 생성
- CORS 미들웨어 설정
- 각 도메인별 라우터(members, camps, events, attention, imports 등) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임
- 운영 환경에서도 안전하게 상태 확인 가능하도록 health/db-ping 제공

관련 파일:
- shepherd.core.config        : 환경 변수 및 설정 로드
- shepherd.core.deps          : DB 세션 의존성
- shepherd.routers.*          : 기능별 API 라우터

"""

import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from shepherd.core.config import settings
from shepherd.core.deps import get_db
from shepherd.routers import (
    admin,
    assignments,
    attention,
    camps,
    dashboard,
    events,
    follow_ups,
    imports,
    members,
    messaging,
    profile,
)
from shepherd.routers import settings as settings_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Shepherd's View Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(members.router)
app.include_router(follow_ups.router)
app.include_router(profile.router)
app.include_router(messaging.router)
app.include_router(attention.router)
app.include_router(dashboard.router)
app.include_router(camps.router)
app.include_router(events.router)
app.include_router(assignments.router)
app.include_router(imports.router)
app.include_router(settings_router.router)
app.include_router(admin.router)

"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인
- 로드밸런서 / 배포 환경에서 서버 상태 확인 용도

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인
- 서버는 살아 있으나 DB가 죽은 상황을 분리해서 감지 가능

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
