from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from rewardapi.models.referral import Referral, ReferralMilestone, ReferralTaskCompletion
from rewardapi.repositories.base import BaseRepository
from rewardapi.schemas.referral import ReferralMilestoneEntry, ReferralResponse


class ReferralRepository(BaseRepository[Referral, ReferralResponse]):
    def __init__(self, db: Session):
        super().__init__(Referral, ReferralResponse, db)

    def get_by_referred(self, referred_id: str) -> Optional[Referral]:
        return (
            self.db.query(Referral).filter(Referral.referred_id == referred_id).first()
        )

    def create_referral(self, referrer_id: str, referred_id: str) -> Referral:
        referral = Referral(referrer_id=referrer_id, referred_id=referred_id)
        self.db.add(referral)
        self.db.flush()
        return referral

    def count_referrals(self, referrer_id: str) -> int:
        return self.count({"referrer_id": referrer_id})

    def add_task_completion(
        self,
        referrer_id: str,
        referred_id: str,
        task_id: int,
        task_title: str,
        coins_earned: int,
        completed_on: date,
    ) -> ReferralTaskCompletion:
        completion = ReferralTaskCompletion(
            referrer_id=referrer_id,
            referred_id=referred_id,
            task_id=task_id,
            task_title=task_title,
            coins_earned=coins_earned,
            completed_on=completed_on,
        )
        self.db.add(completion)
        self.db.flush()
        return completion

    def count_completions(self, referrer_id: str, referred_id: Optional[str] = None) -> int:
        query = self.db.query(func.count(ReferralTaskCompletion.id)).filter(
            ReferralTaskCompletion.referrer_id == referrer_id
        )
        if referred_id is not None:
            query = query.filter(ReferralTaskCompletion.referred_id == referred_id)
        return int(query.scalar() or 0)

    def milestone_exists(self, referrer_id: str, referred_id: str, milestone: int) -> bool:
        return (
            self.db.query(ReferralMilestone.id)
            .filter(
                ReferralMilestone.referrer_id == referrer_id,
                ReferralMilestone.referred_id == referred_id,
                ReferralMilestone.milestone == milestone,
            )
            .first()
            is not None
        )

    def add_milestone(
        self, referrer_id: str, referred_id: str, milestone: int, bonus_coins: int
    ) -> ReferralMilestone:
        record = ReferralMilestone(
            referrer_id=referrer_id,
            referred_id=referred_id,
            milestone=milestone,
            bonus_coins=bonus_coins,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get_milestones(self, referrer_id: str) -> List[ReferralMilestoneEntry]:
        rows = (
            self.db.query(ReferralMilestone)
            .filter(ReferralMilestone.referrer_id == referrer_id)
            .order_by(ReferralMilestone.id)
            .all()
        )
        return [
            ReferralMilestoneEntry(
                referred_id=row.referred_id,
                milestone=row.milestone,
                bonus_coins=row.bonus_coins,
            )
            for row in rows
        ]
