"""
core/errors.py

서비스 계층 예외 → HTTP 응답 변환.

서비스 함수는 FastAPI 를 모르기 때문에 아래 예외만 던진다.
라우터는 SERVICE_ERRORS 를 잡아서 http_error() 로 변환한다.

매핑:
- ValueError             → 400 (입력 검증 실패)
- ScopeViolation         → 403 (범위 밖 / 역할 부족)
- NotFound               → 404
- IdentityProviderError  → 502 (외부 인증 서버 실패)

"""

import logging

from fastapi import HTTPException

from shepherd.services.identity import IdentityProviderError
from shepherd.services.scope import NotFound, ScopeViolation

logger = logging.getLogger(__name__)

SERVICE_ERRORS = (ValueError, ScopeViolation, NotFound, IdentityProviderError)


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc) or "Not found")
    if isinstance(exc, ScopeViolation):
        return HTTPException(status_code=403, detail=str(exc) or "Forbidden")
    if isinstance(exc, IdentityProviderError):
        logger.warning("Identity provider error: %s", exc)
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def db_error(exc: Exception) -> HTTPException:
    logger.exception("Database error")
    return HTTPException(status_code=500, detail=f"Database error: {type(exc).__name__}")
