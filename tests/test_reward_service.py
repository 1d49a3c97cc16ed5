"""
Tests for reward coupon issuance.
"""

from datetime import timedelta
from decimal import Decimal

from sqlalchemy import func, select

from app.core.exceptions import ConflictException
from app.models import Coupon
from app.services.reward_service import RewardService
from app.utils.helpers import utcnow


class TestIssueReward:
    async def test_reward_terms(self, db_session, make_user):
        user = await make_user()

        coupon = await RewardService(db_session).issue_reward(user.id)

        assert coupon.code.startswith("REWARD")
        assert len(coupon.code) == len("REWARD") + 6
        assert coupon.user_id == user.id
        assert coupon.discount_percentage == Decimal("10")
        assert coupon.usage_limit == 1
        assert coupon.minimum_purchase == Decimal("50")
        remaining = coupon.expiration_date - utcnow()
        assert timedelta(days=29) < remaining <= timedelta(days=30)

    async def test_one_live_reward_per_user(self, db_session, make_user):
        user = await make_user()
        service = RewardService(db_session)

        assert await service.issue_reward(user.id) is not None
        assert await service.issue_reward(user.id) is None

        count = await db_session.scalar(select(func.count(Coupon.id)).where(Coupon.user_id == user.id))
        assert count == 1

    async def test_used_reward_allows_a_new_one(self, db_session, make_user, make_coupon):
        user = await make_user()
        await make_coupon(user, code="REWARDOLD1", usage_limit=1, used_count=1, is_active=False)

        assert await RewardService(db_session).issue_reward(user.id) is not None

    async def test_expired_reward_allows_a_new_one(self, db_session, make_user, make_coupon):
        user = await make_user()
        await make_coupon(user, code="REWARDOLD2", expires_in=timedelta(days=-1))

        assert await RewardService(db_session).issue_reward(user.id) is not None

    async def test_other_coupons_do_not_count_as_rewards(self, db_session, make_user, make_coupon):
        user = await make_user()
        await make_coupon(user, code="SAVE20")

        assert await RewardService(db_session).issue_reward(user.id) is not None

    async def test_code_collisions_are_retried(self, db_session, make_user, monkeypatch):
        user = await make_user()
        service = RewardService(db_session)
        real_create = service.coupon_service.create_coupon
        attempts = []

        async def flaky_create(**kwargs):
            attempts.append(kwargs["code"])
            if len(attempts) < 3:
                raise ConflictException("Coupon code already exists")
            return await real_create(**kwargs)

        monkeypatch.setattr(service.coupon_service, "create_coupon", flaky_create)

        coupon = await service.issue_reward(user.id)

        assert len(attempts) == 3
        assert coupon.code == attempts[-1]

    async def test_gives_up_after_repeated_collisions(self, db_session, make_user, monkeypatch):
        user = await make_user()
        service = RewardService(db_session)

        async def always_taken(**kwargs):
            raise ConflictException("Coupon code already exists")

        monkeypatch.setattr(service.coupon_service, "create_coupon", always_taken)

        assert await service.issue_reward(user.id) is None

    async def test_errors_are_swallowed(self, db_session, make_user, monkeypatch):
        user = await make_user()
        service = RewardService(db_session)

        async def broken(user_id):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(service, "has_live_reward", broken)

        assert await service.issue_reward(user.id) is None
