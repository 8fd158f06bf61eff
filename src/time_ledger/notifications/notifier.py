"""E-mail notifications for users over their daily hours."""

import logging
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.message import EmailMessage
from typing import Any, Optional

from time_ledger.core.config import ConfigManager
from time_ledger.core.models import User
from time_ledger.core.storage import StorageManager

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Send the daily over-hours e-mail on a background worker.

    ``dispatch`` returns immediately. A missing user or an SMTP failure is
    logged by the worker and never reaches the caller.
    """

    def __init__(
        self,
        storage: StorageManager,
        config: ConfigManager,
        executor: Optional[ThreadPoolExecutor] = None,
        transport: Any = smtplib.SMTP,
    ):
        """Initialize notifier.

        Args:
            storage: Storage to look users up in
            config: Configuration with the ``notifications`` section
            executor: Worker pool. A single-thread pool is created if None.
            transport: SMTP client class, ``smtplib.SMTP`` by default
        """
        self.storage = storage
        self.config = config
        self.executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="time-ledger-mail"
        )
        self.transport = transport

    def dispatch(self, user_id: int) -> Future:
        """Queue the notification for ``user_id``.

        Errors other than the delivery failures handled by the worker stay
        on the returned future and are logged when it completes.
        """
        future = self.executor.submit(self._deliver, user_id)
        future.add_done_callback(lambda done: self._log_unexpected_error(user_id, done))
        return future

    def _log_unexpected_error(self, user_id: int, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                f"Notification to user {user_id} failed: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)

    def build_message(self, user: User) -> EmailMessage:
        threshold = self.config.get("notifications.threshold_hours", 8)
        msg = EmailMessage()
        msg["Subject"] = f"You have worked more than {threshold} hours today"
        msg["From"] = self.config.get("notifications.mail_from", "no-reply@time-ledger.local")
        msg["To"] = user.email
        msg.set_content(
            f"Hello {user.name},\n\n"
            f"You have logged at least {threshold} hours of work today. "
            "Consider taking a break.\n"
        )
        return msg

    def _deliver(self, user_id: int) -> bool:
        user = self.storage.get_user(user_id)
        if user is None:
            logger.error(f"User with ID {user_id} not found.")
            return False

        try:
            self._send(self.build_message(user))
        except (OSError, smtplib.SMTPException) as e:
            logger.error(f"Failed to send notification to user {user_id}: {e}")
            return False

        logger.info(f"Sent daily notification to user {user_id}")
        return True

    def _send(self, msg: EmailMessage) -> None:
        host = self.config.get("notifications.smtp.host", "localhost")
        port = self.config.get("notifications.smtp.port", 25)
        username = self.config.get("notifications.smtp.username")
        password = self.config.get("notifications.smtp.password")

        with self.transport(host, port) as s:
            if self.config.get("notifications.smtp.tls", False):
                s.starttls()
            if username and password:
                s.login(username, password)
            s.send_message(msg)
