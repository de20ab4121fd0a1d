# ClinicClock - Pending Password Setups
# Holds first-time clock-ins between the two HTTP requests of the setup flow

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from clinicclock.services.outcomes import ClockInRequiresPasswordSetup


@dataclass
class _Entry:
    outcome: ClockInRequiresPasswordSetup
    expires_at: float


class PendingSetupStore:
    """
    In-memory holding area for ClockInRequiresPasswordSetup outcomes.
    
    Nothing here touches the database. An entry is handed out once, by
    its token, and disappears after ttl_seconds. A kiosk restart simply
    drops any pending setups; the employee clocks in again.
    """
    
    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
    
    def put(self, outcome: ClockInRequiresPasswordSetup) -> str:
        token = secrets.token_urlsafe(24)
        with self._lock:
            self._purge()
            self._entries[token] = _Entry(outcome, self.clock() + self.ttl_seconds)
        return token
    
    def peek(self, token: str) -> Optional[ClockInRequiresPasswordSetup]:
        """The pending outcome for token, left in place."""
        with self._lock:
            self._purge()
            entry = self._entries.get(token)
            return entry.outcome if entry else None
    
    def take(self, token: str) -> Optional[ClockInRequiresPasswordSetup]:
        """The pending outcome for token, removed so it can't be used again."""
        with self._lock:
            self._purge()
            entry = self._entries.pop(token, None)
            return entry.outcome if entry else None
    
    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._entries)
    
    def _purge(self) -> None:
        now = self.clock()
        expired = [token for token, entry in self._entries.items() if entry.expires_at <= now]
        for token in expired:
            del self._entries[token]
