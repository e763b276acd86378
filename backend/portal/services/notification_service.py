"""
Outgoing email: SendGrid sender plus a fire-and-forget dispatcher.

The sender never raises to its caller. The dispatcher runs each send as an
independent asyncio task bounded by a timeout, so order and status changes
never wait on (or fail because of) email delivery.
"""

import asyncio
import logging
from typing import Optional, Set

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

from portal.config import settings

logger = logging.getLogger(__name__)


class NotificationSender:
    """Sends HTML email through SendGrid."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_API_KEY
        self.from_email = from_email or settings.FROM_EMAIL
        self.from_name = from_name or settings.FROM_NAME
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT
        self._client: Optional[SendGridAPIClient] = None
        if not self.api_key:
            logger.warning("SENDGRID_API_KEY is not set, outgoing email is disabled")

    def _get_client(self) -> SendGridAPIClient:
        if self._client is None:
            client = SendGridAPIClient(self.api_key)
            # Socket timeout for the HTTP call itself; the dispatcher only stops waiting
            client.client.timeout = self.timeout
            self._client = client
        return self._client

    def send(self, to: str, subject: str, html_body: str) -> None:
        if not self.api_key:
            logger.warning(f"Email skipped (no API key): to={to} subject={subject!r}")
            return

        message = Mail(
            from_email=From(self.from_email, self.from_name),
            to_emails=to,
            subject=subject,
            html_content=html_body,
        )
        try:
            response = self._get_client().send(message)
            logger.info(f"Email sent to {to}: {subject!r} (status {response.status_code})")
        except Exception as e:
            body = getattr(e, "body", None)
            logger.error(f"Email to {to} failed: {e}" + (f" - response: {body}" if body else ""))


class NotificationDispatcher:
    """
    Schedules notification sends without blocking the caller.

    Inside a running event loop each send becomes a background task wrapped in
    ``asyncio.wait_for``; outside one (scripts, plain threads) the send runs
    inline under the same error boundary.
    """

    def __init__(self, sender: NotificationSender, timeout: Optional[float] = None):
        self.sender = sender
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, to: str, subject: str, html_body: str) -> None:
        if not to:
            logger.warning(f"Notification {subject!r} has no recipient, skipped")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._send_guarded(to, subject, html_body)
            return

        task = loop.create_task(self._deliver(to, subject, html_body))
        # Keep a reference until done, the loop only holds weak ones
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _deliver(self, to: str, subject: str, html_body: str) -> None:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.sender.send, to, subject, html_body),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Email to {to} timed out after {self.timeout}s: {subject!r}")
        except Exception as e:
            logger.error(f"Email to {to} failed: {e}", exc_info=True)

    def _send_guarded(self, to: str, subject: str, html_body: str) -> None:
        try:
            self.sender.send(to, subject, html_body)
        except Exception as e:
            logger.error(f"Email to {to} failed: {e}", exc_info=True)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait (bounded) for in-flight sends, used at shutdown."""
        if not self._tasks:
            return
        logger.info(f"Waiting for {len(self._tasks)} pending notification(s)...")
        done, pending = await asyncio.wait(
            set(self._tasks), timeout=timeout if timeout is not None else self.timeout
        )
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"Cancelled {len(pending)} notification(s) still pending at shutdown")
