"""

Admin 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_EMAIL 을 읽어 Admin 계정(User)을 생성한다.
- Identity Provider 가 설정되어 있으면 로그인 계정(identity)도 함께 만들고,
  그 id 를 User.id 로 사용한다.
- 이미 Admin 계정이 존재하면 생성하지 않고 종료한다.

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from shepherd.db.session import SessionLocal
from shepherd.models.user import User, Role
from shepherd.services.identity import IdentityProvider


def main():
    db = SessionLocal()
    try:
        exists = db.scalar(select(User).where(User.role == Role.ADMIN))
        if exists:
            print("✅ Admin already exists. Skip creation.")
            return

        email = os.environ["ADMIN_EMAIL"].strip().lower()

        email_exists = db.scalar(select(User).where(User.email == email))
        if email_exists:
            raise RuntimeError("Email already exists but is not Admin")

        identity_id = IdentityProvider.from_settings().create_identity(email)

        user = User(id=identity_id, email=email, role=Role.ADMIN)
        db.add(user)
        db.commit()

        print(f"🚀 Admin created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
