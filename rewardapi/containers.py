from dependency_injector import containers, providers

from rewardapi.config import Settings
from rewardapi.services.ledger_service import LedgerService
from rewardapi.services.referral_service import ReferralService
from rewardapi.services.reward_service import RewardService
from rewardapi.services.streak_service import StreakService
from rewardapi.services.task_service import TaskService
from rewardapi.services.withdrawal_service import WithdrawalService
from rewardapi.utils.date_utils import day_clock


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)
    # today/yesterday 키를 만드는 단일 기준 시계 (테스트에서 override)
    clock = providers.Singleton(day_clock, tz_name=config.provided.TIMEZONE)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies. db 세션은 요청마다 호출 시점에 전달."""

    config = providers.DependenciesContainer()

    ledger_service = providers.Factory(LedgerService, clock=config.clock)
    streak_service = providers.Factory(StreakService, clock=config.clock)
    task_service = providers.Factory(TaskService, clock=config.clock)
    reward_service = providers.Factory(RewardService)
    withdrawal_service = providers.Factory(WithdrawalService, clock=config.clock)
    referral_service = providers.Factory(ReferralService, clock=config.clock)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
