from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rewardapi.config import settings


def _engine_options(url: str) -> dict:
    # SQL 로그는 logging_config 의 sqlalchemy.engine 로거가 담당
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,  # 연결 유효성 검사
        "pool_recycle": 3600,  # 1시간마다 연결 재생성
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Use expire_on_commit=False to avoid DetachedInstanceError when accessing
# attributes after commit within the same request scope (common FastAPI pattern).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
