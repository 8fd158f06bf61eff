"""Day-scoped "already notified" markers."""

import json
import logging
import threading
from datetime import date
from pathlib import Path

logger = logging.getLogger(__name__)


class NotificationMarkerStore:
    """Remembers which users were notified on which day.

    Markers live in a JSON file mapping ISO dates to lists of user ids.
    Writing a marker prunes every earlier day, so a marker expires at the
    end of its day.
    """

    def __init__(self, state_file: Path):
        """Initialize marker store.

        Args:
            state_file: Path to the JSON marker file
        """
        self.state_file = state_file
        self._lock = threading.Lock()

    def _load(self) -> dict[str, list[int]]:
        if not self.state_file.exists():
            return {}
        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load notification markers: {e}")
            return {}
        return {day: [int(uid) for uid in users] for day, users in data.items()}

    def _save(self, markers: dict[str, list[int]]) -> None:
        """Atomic write: temp file then rename (lock held by caller)."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.state_file.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(markers, f, indent=2)
        temp_file.replace(self.state_file)

    def is_marked(self, user_id: int, day: date) -> bool:
        with self._lock:
            return user_id in self._load().get(day.isoformat(), [])

    def mark(self, user_id: int, day: date) -> bool:
        """Set the marker for ``(user_id, day)``.

        Returns:
            False if the marker was already set, True if this call set it
        """
        key = day.isoformat()
        with self._lock:
            markers = {d: users for d, users in self._load().items() if d >= key}
            users = markers.setdefault(key, [])
            if user_id in users:
                return False
            users.append(user_id)
            self._save(markers)
            return True

    def clear(self) -> None:
        with self._lock:
            if self.state_file.exists():
                self.state_file.unlink()
