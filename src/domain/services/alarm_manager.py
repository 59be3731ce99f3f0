"""Process-wide alarm state for remote dependencies."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from src.domain.entities.health import Alarm
from src.shared import get_logger

logger = get_logger(__name__)


class AlarmManager:
    """
    Tracks which dependencies are currently failing.

    One alarm exists per name. Raising an already raised alarm and
    releasing one that is not raised are no-ops, so concurrent pipelines
    reporting the same outcome do not produce duplicate transitions.
    """

    def __init__(self) -> None:
        self._alarms: Dict[str, Alarm] = {}
        self._lock = threading.Lock()

    def raise_alarm(self, name: str, message: str) -> bool:
        with self._lock:
            if name in self._alarms:
                return False
            self._alarms[name] = Alarm(name=name, message=message)

        logger.error("alarm.raised", alarm=name, message=message)
        return True

    def release_alarm(self, name: str) -> bool:
        with self._lock:
            alarm = self._alarms.pop(name, None)

        if alarm is None:
            return False
        logger.info("alarm.released", alarm=name)
        return True

    def is_raised(self, name: str) -> bool:
        with self._lock:
            return name in self._alarms

    def get(self, name: str) -> Optional[Alarm]:
        with self._lock:
            return self._alarms.get(name)

    def list_alarms(self) -> List[Alarm]:
        with self._lock:
            return sorted(self._alarms.values(), key=lambda alarm: alarm.raised_at)

    def clear(self) -> None:
        with self._lock:
            self._alarms.clear()
