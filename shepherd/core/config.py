"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- 외부 인증(Identity Provider) JWT 검증 정보 / 관리자 API 키
- SMS(Arkesel) / Email(Resend) 게이트웨이 키
- Google Sheets 가져오기용 API 키
- CORS 허용 도메인 목록, 로그 레벨

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 외부 연동 키가 비어 있으면 해당 기능은 "미설정" 결과를 반환 (예외 X)

관련 파일:
- shepherd.main               : CORS / 로깅 초기화 시 설정 사용
- shepherd.core.security      : JWT 시크릿 / audience 사용
- shepherd.db.session         : DATABASE_URL 사용
- shepherd.services.messaging : SMS / Email 키 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    # Identity Provider(Supabase 호환)가 발급한 access token 검증용
    AUTH_JWT_SECRET: str
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str | None = "authenticated"

    # Identity Provider 관리자 API (계정 생성/삭제)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # 메시지 게이트웨이
    ARKESEL_API_KEY: str | None = None
    ARKESEL_SENDER_ID: str = "AgapeMin"
    RESEND_API_KEY: str | None = None
    RESEND_FROM_EMAIL: str = "Shepherd's View <noreply@shepherdsview.org>"
    GATEWAY_TIMEOUT_SECONDS: float = 20.0

    # 국가 코드 없는 0으로 시작하는 번호는 가나 번호로 간주
    DEFAULT_COUNTRY_CODE: str = "233"

    GOOGLE_SHEETS_API_KEY: str | None = None

    # 회원 셀프 업데이트 링크 생성용
    APP_URL: str = "http://localhost:3000"
    UPDATE_TOKEN_EXPIRE_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
