"""Tests for the demo data seeding script."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.config import settings
from restaunax.core.errors import ForbiddenError
from scripts.seed_demo_data import parse_args, run_seed
from tests.conftest import TEST_ACCOUNT_ID


class TestParseArgs:
    def test_account_and_seed(self):
        args = parse_args(["--account-id", str(TEST_ACCOUNT_ID), "--seed", "7"])
        assert args.account_id == TEST_ACCOUNT_ID
        assert args.seed == 7

    def test_seed_is_optional(self):
        args = parse_args(["--account-id", str(uuid.uuid4())])
        assert args.seed is None

    def test_account_id_is_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRunSeed:
    async def test_same_seed_same_history(self, db_session: AsyncSession, test_account):
        first = await run_seed(db_session, test_account.id, seed=11)
        second = await run_seed(db_session, test_account.id, seed=11)

        assert first.orders_created == second.orders_created
        assert first.orders_created >= 30

    async def test_refused_outside_development(
        self, db_session: AsyncSession, test_account
    ):
        settings.environment = "production"
        with pytest.raises(ForbiddenError):
            await run_seed(db_session, test_account.id, seed=1)
