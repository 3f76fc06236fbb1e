#!/usr/bin/env python3
"""Delete expired spam from one page field, or from every page.

Usage:
    python scripts/purge_spam.py <field_name> [page_id ...]

Meant to run periodically (e.g. from cron). Spam that still has live
replies is kept.
"""

import asyncio
import sys

import logfire
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commentary.application.usecase.comment import PurgeSpamRequest, PurgeSpamUseCase
from commentary.config import Settings
from commentary.domain.value import CommentStatus
from commentary.persistence.tables import comments_table
from commentary.util.di.container import create_container
from commentary.util.observability import configure_logfire


async def _pages_with_spam(container, field_name: str) -> list[int]:
    async with container() as request_container:
        session = await request_container.get(AsyncSession)
        result = await session.execute(
            select(comments_table.c.pages_id)
            .where(
                comments_table.c.field == field_name,
                comments_table.c.status == CommentStatus.SPAM,
            )
            .distinct()
        )
        return [row.pages_id for row in result.fetchall()]


async def purge(field_name: str, page_ids: list[int]) -> int:
    container = create_container(with_fastapi=False)
    try:
        if not page_ids:
            page_ids = await _pages_with_spam(container, field_name)

        total = 0
        for page_id in page_ids:
            # One transaction per page keeps each scope lock short
            async with container() as request_container:
                use_case = await request_container.get(PurgeSpamUseCase)
                response = await use_case.execute(
                    PurgeSpamRequest(page_id=page_id, field_name=field_name)
                )
                total += response.deleted
        return total
    finally:
        await container.close()


def main() -> int:
    """Purge spam and log the result to Logfire."""
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    settings = Settings()
    configure_logfire(settings)

    field_name = sys.argv[1]
    page_ids = [int(arg) for arg in sys.argv[2:]]

    try:
        deleted = asyncio.run(purge(field_name, page_ids))
    except Exception as e:
        logfire.error(
            "Spam purge failed",
            field=field_name,
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise

    logfire.info("Spam purge finished", field=field_name, deleted=deleted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
