"""Background delivery of notification mail."""

import asyncio

import logfire
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from commentary.domain.model.notification import Notification

from .mail_transport import MailTransport


class NotificationDispatcher:
    """Delivers notifications off the request path.

    Each notification is sent from its own task with bounded retry. Task
    references are kept until they finish so they are not garbage collected
    mid-flight, and ``drain`` waits for everything still in flight.
    """

    def __init__(
        self,
        mail_transport: MailTransport,
        retry_attempts: int = 3,
        retry_wait_seconds: float = 1.0,
    ) -> None:
        """Initialize dispatcher.

        Args:
            mail_transport: Transport used to send each message
            retry_attempts: Total delivery attempts per message
            retry_wait_seconds: Base of the exponential backoff
        """
        self.mail_transport = mail_transport
        self.retry_attempts = retry_attempts
        self.retry_wait_seconds = retry_wait_seconds
        self._tasks: set[asyncio.Task[bool]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, notification: Notification) -> asyncio.Task[bool]:
        """Schedule delivery and return immediately."""
        task = asyncio.create_task(
            self._deliver(notification), name=f"notify:{notification.recipient}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logfire.debug(
            "Notification scheduled",
            recipient=notification.recipient,
            subject=notification.subject,
        )
        return task

    async def drain(self) -> None:
        """Wait for all scheduled deliveries to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _deliver(self, notification: Notification) -> bool:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=self.retry_wait_seconds, max=30),
                reraise=True,
            ):
                with attempt:
                    await self.mail_transport.send(
                        recipient=notification.recipient,
                        subject=notification.subject,
                        body_text=notification.body_text,
                        body_html=notification.body_html,
                        from_email=notification.from_email,
                    )
        except Exception as e:
            logfire.error(
                "Notification delivery failed",
                recipient=notification.recipient,
                subject=notification.subject,
                attempts=self.retry_attempts,
                error=str(e),
            )
            return False

        logfire.info(
            "Notification delivered",
            recipient=notification.recipient,
            subject=notification.subject,
        )
        return True


class NotificationOutbox:
    """Notifications produced while handling one request.

    Nothing is handed to the dispatcher until ``release``, which the caller
    invokes once the request's writes are committed. An outbox that is
    never released is dropped with its request, so a failed transaction
    sends no mail.
    """

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self.dispatcher = dispatcher
        self._queued: list[Notification] = []

    def __len__(self) -> int:
        return len(self._queued)

    def add(self, notification: Notification) -> None:
        self._queued.append(notification)

    def release(self) -> int:
        """Dispatch everything queued so far.

        Returns:
            Number of notifications dispatched
        """
        queued, self._queued = self._queued, []
        for notification in queued:
            self.dispatcher.dispatch(notification)
        if queued:
            logfire.info("Notifications released", count=len(queued))
        return len(queued)

    def discard(self) -> int:
        """Drop everything queued so far without sending it."""
        queued, self._queued = self._queued, []
        if queued:
            logfire.warn("Notifications discarded", count=len(queued))
        return len(queued)
