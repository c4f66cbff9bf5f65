"""

MASTER 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 MASTER_* 환경 변수를 읽어
  MASTER 계정을 생성하고 Bearer 토큰을 출력한다.
- 이미 MASTER 계정이 존재하면 새로 만들지 않고 기존 계정의 토큰만 출력한다.

사용 목적:
- 로그인 흐름이 없는 환경에서 특기 카탈로그 관리 API에 접근할 수 있는
  최상위 관리자 계정을 초기화하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_master

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from dbvclub.db.session import SessionLocal
from dbvclub.models.user import User, Role
from dbvclub.core.security import create_access_token


def main():
    db = SessionLocal()
    try:
        master = db.scalar(
            select(User).where(User.role == Role.MASTER)
        )
        if master:
            print("✅ MASTER already exists. Skip creation.")
        else:
            email = os.environ["MASTER_EMAIL"]
            name = os.environ.get("MASTER_NAME", "Master")

            email_exists = db.scalar(
                select(User).where(User.email == email)
            )
            if email_exists:
                raise RuntimeError("Email already exists but is not MASTER")

            master = User(email=email, name=name, role=Role.MASTER)
            db.add(master)
            db.commit()
            db.refresh(master)

            print(f"🚀 MASTER created: {email}")

        print(f"Bearer {create_access_token(str(master.id))}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
