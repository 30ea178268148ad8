import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rewardapi.database.connection import engine
from rewardapi.models import Base


def init_db():
    """데이터베이스 초기화 - 모든 테이블 생성"""
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized successfully: {len(Base.metadata.tables)} tables")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
