"""
기본 데이터 시드 스크립트
일일 태스크와 코인 상점 상품을 초기 데이터로 설정
"""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rewardapi.database.connection import SessionLocal
from rewardapi.models.rewards import Reward
from rewardapi.models.tasks import DailyTask
from rewardapi.services.rules_engine import TaskKind

DEFAULT_TASKS = [
    {
        "title": "Watch a video",
        "description": "Watch any video today",
        "task_type": TaskKind.WATCH_VIDEO.value,
        "reward_amount": 5,
    },
    {
        "title": "Watch 3 videos",
        "description": "Watch three different videos today",
        "task_type": TaskKind.WATCH_3_VIDEOS.value,
        "reward_amount": 15,
    },
    {
        "title": "Daily login",
        "description": "Check in today",
        "task_type": TaskKind.DAILY_LOGIN.value,
        "reward_amount": 2,
    },
    {
        "title": "Refer a friend",
        "description": "Have at least one friend join with your referral",
        "task_type": TaskKind.REFERRAL.value,
        "reward_amount": 10,
    },
    {
        "title": "7-day streak",
        "description": "Keep a 7 day login streak",
        "task_type": TaskKind.STREAK_7.value,
        "reward_amount": 20,
    },
]

DEFAULT_REWARDS = [
    {"name": "Golden Frame", "description": "Profile frame", "type": "frame", "icon": "frame", "coin_price": 200},
    {"name": "Early Access Badge", "description": "Profile badge", "type": "badge", "icon": "badge", "coin_price": 500},
    {"name": "Night Theme", "description": "Dark player theme", "type": "theme", "icon": "moon", "coin_price": 800},
    {"name": "Ad-free Hour", "description": "One hour without ads", "type": "boost", "icon": "zap", "coin_price": 1500},
]


def seed_tasks(db):
    """기본 일일 태스크 시드 - 같은 task_type 이 이미 있으면 건너뜀"""
    existing = {row.task_type for row in db.query(DailyTask.task_type).all()}
    added = 0
    for task in DEFAULT_TASKS:
        if task["task_type"] in existing:
            continue
        db.add(DailyTask(is_active=True, **task))
        added += 1
    return added


def seed_rewards(db):
    """기본 상점 상품 시드 - 같은 이름이 이미 있으면 건너뜀"""
    existing = {row.name for row in db.query(Reward.name).all()}
    added = 0
    for reward in DEFAULT_REWARDS:
        if reward["name"] in existing:
            continue
        db.add(Reward(is_active=True, **reward))
        added += 1
    return added


def main():
    db = SessionLocal()
    try:
        tasks = seed_tasks(db)
        rewards = seed_rewards(db)
        db.commit()
        print(f"✅ 시드 데이터 생성 완료: 태스크 {tasks}개, 상품 {rewards}개")
    except Exception as e:
        db.rollback()
        print(f"❌ 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
