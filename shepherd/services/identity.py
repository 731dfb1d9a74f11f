"""
services/identity.py

외부 Identity Provider(Supabase 호환) 관리자 API 클라이언트.

Leader / Shepherd 승격 시 로그인 계정(identity)을 만들고,
강등 시 해당 계정을 삭제하는 데 사용한다.

설계 원칙:
- SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY 가 없으면 "미설정" 모드
  (계정 id 를 로컬에서 uuid4 로 생성하고 경고 로그만 남김)
- 계정 생성 실패는 IdentityProviderError 로 올려 라우터에서 502 로 변환
- 계정 삭제 실패는 로그만 남김 (DB 정합성은 이미 커밋된 상태)

"""

import logging
import uuid

import httpx

from shepherd.core.config import settings

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    pass


class IdentityProvider:
    def __init__(self, base_url: str | None, service_key: str | None, timeout: float = 20.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.service_key = service_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "IdentityProvider":
        return cls(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }

    def create_identity(self, email: str, password: str | None = None) -> uuid.UUID:
        if not self.configured:
            logger.warning("Identity provider not configured; generating local id for %s", email)
            return uuid.uuid4()

        payload = {"email": email, "email_confirm": True}
        if password:
            payload["password"] = password

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    f"{self.base_url}/auth/v1/admin/users",
                    headers=self._headers(),
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.warning("Identity provider request failed for %s", email, exc_info=exc)
            raise IdentityProviderError("Identity provider unreachable") from exc

        if response.status_code >= 400:
            try:
                message = response.json().get("msg") or response.json().get("message")
            except ValueError:
                message = None
            logger.warning("Identity provider returned %s for %s", response.status_code, email)
            raise IdentityProviderError(message or f"Identity provider error ({response.status_code})")

        data = response.json()
        # 응답 형태: {"id": ...} 또는 {"user": {"id": ...}}
        raw_id = data.get("id") or (data.get("user") or {}).get("id")
        if not raw_id:
            raise IdentityProviderError("Identity provider returned no user id")
        return uuid.UUID(raw_id)

    def delete_identity(self, user_id: uuid.UUID) -> bool:
        if not self.configured:
            return False

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.delete(
                    f"{self.base_url}/auth/v1/admin/users/{user_id}",
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.warning("Failed to delete identity %s", user_id, exc_info=exc)
            return False

        if response.status_code >= 400 and response.status_code != 404:
            logger.warning("Identity provider returned %s deleting %s", response.status_code, user_id)
            return False
        return True
