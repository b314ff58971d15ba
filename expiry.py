import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Dict, NamedTuple, Optional

from constants import CODE_TTL_SECONDS
from logging_config import get_logger

logger = get_logger(__name__)

ExpireCallback = Callable[[str], None]


class _Timer(NamedTuple):
    handle: asyncio.TimerHandle
    deadline: float  # wall clock, for reporting
    token: object


class ExpiryScheduler:
    """Cancelable per-code idle timers on the running event loop.

    All timers live in one table keyed by room code; at most one is live per code.
    """

    def __init__(self, timeout: float = CODE_TTL_SECONDS):
        self.timeout = timeout
        self._timers: Dict[str, _Timer] = {}

    def schedule(self, code: str, on_expire: ExpireCallback):
        self.cancel(code)
        loop = asyncio.get_running_loop()
        token = object()
        handle = loop.call_later(self.timeout, self._fire, code, token, on_expire)
        self._timers[code] = _Timer(handle, time.time() + self.timeout, token)
        logger.debug(f"Scheduled expiry for room {code} in {self.timeout}s")

    def cancel(self, code: str) -> bool:
        timer = self._timers.pop(code, None)
        if timer is None:
            return False
        timer.handle.cancel()
        logger.debug(f"Cancelled expiry for room {code}")
        return True

    def cancel_all(self):
        for code in list(self._timers):
            self.cancel(code)

    def is_scheduled(self, code: str) -> bool:
        return code in self._timers

    def deadline(self, code: str) -> Optional[datetime]:
        timer = self._timers.get(code)
        if timer is None:
            return None
        return datetime.fromtimestamp(timer.deadline, tz=timezone.utc)

    def _fire(self, code: str, token: object, on_expire: ExpireCallback):
        timer = self._timers.get(code)
        if timer is None or timer.token is not token:
            logger.debug(f"Ignoring stale expiry timer for room {code}")
            return
        del self._timers[code]
        logger.info(f"Expiry timer fired for room {code}")
        try:
            on_expire(code)
        except Exception as e:
            logger.error(f"Error expiring room {code}: {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._timers)
