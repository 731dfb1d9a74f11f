"""
security.py

외부 Identity Provider가 발급한 JWT Access Token 검증 유틸리티.

이 파일은 인증(auth) 의존성에서 사용하는
저수준(low-level) 토큰 기능만을 제공하며,
라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- Access Token 디코딩 및 subject(user id) 추출
- 로컬 개발/테스트용 Access Token 발급

설계 원칙:
- 토큰은 Identity Provider(Supabase 호환)와 공유한 시크릿(HS256)으로 검증
- audience("authenticated")가 설정되어 있으면 반드시 일치해야 함
- 시간 기반(exp) 만료는 UTC 기준으로 처리

관련 파일:
- shepherd.core.config        : JWT 시크릿 / audience 설정
- shepherd.core.deps          : 토큰을 실제로 검증하는 인증 의존성

"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from shepherd.core.config import settings


"""
Access Token 디코딩 함수

- 서명 / 만료 / audience 검증
- sub(subject)를 UUID로 변환하여 반환
- 유효하지 않으면 JWTError 발생

"""

def decode_access_token(token: str) -> uuid.UUID:
    options = {} if settings.AUTH_JWT_AUDIENCE else {"verify_aud": False}
    payload = jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
        options=options,
    )

    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")

    try:
        return uuid.UUID(sub)
    except ValueError:
        raise JWTError("Subject is not a UUID")


"""
Access Token 발급 함수 (로컬 개발 / 테스트 전용)

- 운영 환경에서는 Identity Provider가 토큰을 발급
- Identity Provider와 같은 형태(sub, email, aud, exp)로 서명

"""

def create_access_token(subject: str, email: str | None = None, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    payload = {
        "sub": subject,
        "exp": int(expire.timestamp()),
    }
    if email:
        payload["email"] = email
    if settings.AUTH_JWT_AUDIENCE:
        payload["aud"] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)
