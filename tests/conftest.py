import os

# rewardapi.config 임포트 전에 설정되어야 함
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rewardapi.models import Ad, Base, DailyTask, Reward, Video
from rewardapi.models.ledger import CoinTransactionType
from rewardapi.repositories.ledger_repository import LedgerRepository
from rewardapi.repositories.wallet_repository import WalletRepository
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.rules_engine import CoinEntry, LedgerDelta
from rewardapi.utils.date_utils import DayKeys

TODAY = date(2024, 6, 15)


class FixedClock:
    """테스트용 고정 시계 - advance()로 날짜 이동"""

    def __init__(self, today: date):
        self.keys = DayKeys.for_date(today)

    def __call__(self) -> DayKeys:
        return self.keys

    def advance(self, days: int = 1) -> None:
        self.keys = DayKeys.for_date(self.keys.today + timedelta(days=days))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def ledger_service(db, clock):
    return LedgerService(db, clock=clock)


@pytest.fixture
def fund(db):
    """원장 항목과 함께 지갑에 코인/잔액 적립 (정합성 유지)"""

    def _fund(user_id: str, coins: int = 0, balance: int = 0) -> None:
        wallet = WalletRepository(db).lock_wallet(user_id)
        entries = ()
        if coins:
            entries = (CoinEntry(coins, CoinTransactionType.EARNED, "test funding"),)
        delta = LedgerDelta(coins=coins, balance=balance, earned=balance, coin_entries=entries)
        LedgerRepository(db).apply_delta(user_id, wallet, delta, TODAY)
        db.commit()

    return _fund


@pytest.fixture
def video(db):
    video = Video(title="Monsoon vlog", owner_id="creator-1", views=0, is_active=True)
    db.add(video)
    db.commit()
    return video


@pytest.fixture
def ad(db):
    ad = Ad(title="Tea ad", ad_type="video", duration=15, earnings_per_view=10, is_active=True)
    db.add(ad)
    db.commit()
    return ad


@pytest.fixture
def make_task(db):
    def _make(task_type: str, reward_amount: int = 5, title: str = None, is_active: bool = True) -> DailyTask:
        task = DailyTask(
            title=title or task_type,
            task_type=task_type,
            reward_amount=reward_amount,
            is_active=is_active,
        )
        db.add(task)
        db.commit()
        return task

    return _make


@pytest.fixture
def reward(db):
    reward = Reward(name="Golden Frame", type="frame", icon="frame", coin_price=200, is_active=True)
    db.add(reward)
    db.commit()
    return reward


@pytest.fixture
def app(session_factory, clock):
    from dependency_injector import providers

    from rewardapi.database.session import get_db
    from rewardapi.main import create_app

    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.container.config.clock.override(providers.Object(clock))
    yield app
    app.container.config.clock.reset_override()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


def user_headers(user_id: str = "user-1", role: str = None) -> dict:
    headers = {"X-User-Id": user_id}
    if role:
        headers["X-User-Role"] = role
    return headers
