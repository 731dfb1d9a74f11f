from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from sqlalchemy import select

from shepherd.core.security import decode_access_token
from shepherd.db.session import SessionLocal
from shepherd.models.user import User, Role
from shepherd.services.identity import IdentityProvider
from shepherd.services.messaging import MessageGateway
from shepherd.services.scope import ActingUser

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _resolve_user(token: str, db: Session) -> User:
    try:
        user_id = decode_access_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _resolve_user(cred.credentials, db)


# 토큰이 없거나 유효하지 않으면 None (목록/알림 조회는 빈 결과로 응답)
def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    if cred is None:
        return None
    try:
        return _resolve_user(cred.credentials, db)
    except HTTPException:
        return None


def get_acting_user(current_user: User = Depends(get_current_user)) -> ActingUser:
    return ActingUser.from_user(current_user)


def get_optional_acting_user(current_user: User | None = Depends(get_optional_user)) -> ActingUser | None:
    if current_user is None:
        return None
    return ActingUser.from_user(current_user)


def require_roles(*roles: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role in ({allowed})",
            )
        return current_user
    return _checker

get_current_admin = require_roles(Role.ADMIN)


# 외부 연동 클라이언트 (테스트에서 dependency_overrides 로 교체)
def get_identity_provider() -> IdentityProvider:
    return IdentityProvider.from_settings()


def get_message_gateway() -> MessageGateway:
    return MessageGateway.from_settings()
