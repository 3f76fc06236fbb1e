"""Commit-then-notify step shared by the use cases that send mail."""

from commentary.domain.repository import UnitOfWork
from commentary.domain.service import NotificationOutbox


async def commit_and_notify(unit_of_work: UnitOfWork, outbox: NotificationOutbox) -> None:
    """Commit the request's writes, then release its queued notifications.

    Raises:
        PersistenceError: If the commit fails; the queued mail is discarded
    """
    try:
        await unit_of_work.commit()
    except Exception:
        outbox.discard()
        raise
    outbox.release()
