"""Seed an account with 30 days of demo orders.

Standalone development script. Replaces the account's existing orders with
generated ones, exactly like GET /api/v1/dev/reset-db?account_id=...

Usage:
    cd backend && python -m scripts.seed_demo_data --account-id <uuid> [--seed N]

Refuses to run unless ENVIRONMENT=development.
"""

import argparse
import logging
import random
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.services.dev_reset import DevResetService, ResetResult

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--account-id", type=UUID, required=True)
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible demo data",
    )
    return parser.parse_args(argv)


async def run_seed(
    db: AsyncSession, account_id: UUID, seed: int | None = None
) -> ResetResult:
    """Seed one account through the dev reset service."""
    rng = random.Random(seed)  # nosec B311 - demo data, not security
    return await DevResetService(db).seed_account(account_id, rng=rng)


async def main(argv: list[str] | None = None) -> None:
    """CLI entry point: seed the account against the configured database."""
    import sys

    from restaunax.core.database import async_session_factory, dispose_engine

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    async with async_session_factory() as session:
        result = await run_seed(session, args.account_id, args.seed)

    await dispose_engine()

    logger.info(
        "Seeded %d orders (%s .. %s)",
        result.orders_created,
        result.date_from,
        result.date_to,
    )
    sys.exit(0)


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
