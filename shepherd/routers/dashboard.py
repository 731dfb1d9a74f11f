"""
dashboard.py

메인 대시보드 API.

- 현재 사용자 범위 기준 회원 / 행사 / 생일 통계
- 최근 12주 출석 분석 (행사별 추이, 캠프별 합계, 출석 상위 회원, 최다 출석 목자)
- 로그인하지 않았거나 토큰이 유효하지 않으면 0 / 빈 목록으로 응답 (에러 X)

관련 파일:
- shepherd.services.dashboard   : 통계 계산
- shepherd.services.analytics   : 출석 분석
- shepherd.routers.attention    : "관심 필요" 목록 (대시보드 하단 카드)

"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_optional_acting_user
from shepherd.services.analytics import get_attendance_analytics
from shepherd.services.dashboard import get_dashboard_stats
from shepherd.services.scope import ActingUser

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard_stats(
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    return {"data": get_dashboard_stats(db, acting_user)}


@router.get("/analytics")
def dashboard_analytics(
    db: Session = Depends(get_db),
    acting_user: ActingUser | None = Depends(get_optional_acting_user),
):
    return {"data": get_attendance_analytics(db, acting_user)}
