# -*- coding: utf-8 -*-
"""settings_bus.py

In-process publish/subscribe for user settings (theme, username).

- ``subscribe`` returns an unsubscribe callable.
- Delivery is synchronous and in subscription order.
- A subscriber that raises is logged; delivery to the others continues.
- The last published value per (user_id, key) is kept for reads.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .observability import log_event

logger = logging.getLogger("settings_bus")

SETTINGS_KEYS = ("theme", "username")


@dataclass(frozen=True)
class SettingsEvent:
    key: str
    value: Any
    user_id: Optional[str] = None

    def __post_init__(self):
        if self.key not in SETTINGS_KEYS:
            raise ValueError(f"unknown settings key {self.key!r}; expected one of {SETTINGS_KEYS}")
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError(f"{self.key} must be a non-empty string")

    def to_dict(self):
        return asdict(self)


Subscriber = Callable[[SettingsEvent], None]


class SettingsBus:
    def __init__(self):
        self._subs: List[Tuple[int, Subscriber]] = []
        self._next = 0
        self._current: Dict[Tuple[Optional[str], str], Any] = {}
        self._lock = threading.Lock()

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        with self._lock:
            token = self._next
            self._next += 1
            self._subs.append((token, fn))

        def unsubscribe() -> None:
            with self._lock:
                self._subs = [(t, f) for t, f in self._subs if t != token]

        return unsubscribe

    def publish(self, event: SettingsEvent) -> int:
        """Deliver to every subscriber. Returns how many handled it without error."""
        with self._lock:
            self._current[(event.user_id, event.key)] = event.value
            subs = list(self._subs)

        delivered = 0
        for _, fn in subs:
            try:
                fn(event)
                delivered += 1
            except Exception as exc:
                log_event(
                    logger,
                    "settings_subscriber_failed",
                    level="error",
                    key=event.key,
                    user_id=event.user_id,
                    subscriber=getattr(fn, "__name__", repr(fn)),
                    error=f"{type(exc).__name__}: {exc}",
                )
        return delivered

    def current(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            return {k: v for (uid, k), v in self._current.items() if uid == user_id}

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)
