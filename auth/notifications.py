"""Fire-and-forget email dispatch.

Sends run on a small thread pool so the request that triggered them
returns without waiting. Delivery failures are logged here and dropped;
they never reach the caller.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

from clients.email_client import EmailGatewayClient

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Detached, best-effort email delivery.

    Usage:
        dispatcher = NotificationDispatcher(email_client)
        dispatcher.dispatch(to, subject, html, text)  # returns immediately
        ...
        dispatcher.shutdown()  # on process exit
    """

    def __init__(self, email_client: EmailGatewayClient, max_workers: int = 4):
        self._email_client = email_client
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def dispatch(self, to: str, subject: str, html: str, text: str) -> Future:
        """Queue one email. Never raises for delivery problems.

        The returned future resolves to True on delivery and False on failure,
        including when the dispatcher has already been shut down.
        """
        try:
            future = self._executor.submit(self._deliver, to, subject, html, text)
        except RuntimeError:
            logger.warning("Dispatcher shut down; dropping email to %s: %s", to, subject)
            dropped: Future = Future()
            dropped.set_result(False)
            return dropped

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _deliver(self, to: str, subject: str, html: str, text: str) -> bool:
        try:
            self._email_client.send_email(to=to, subject=subject, html=html, text=text)
        except Exception:
            logger.exception("Failed to send email to %s: %s", to, subject)
            return False
        return True

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def wait_for_pending(self, timeout: float | None = None) -> bool:
        """Block until queued sends finish. Returns False on timeout."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_delivery: bool = True) -> None:
        """Stop accepting work; optionally let queued sends finish."""
        self._executor.shutdown(wait=wait_for_delivery)
