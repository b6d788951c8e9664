"""
OTP store - volatile one-code-per-phone storage with expiry
In-memory by default, Redis-backed when REDIS_URL is configured
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

import redis

from ...config import REDIS_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpEntry:
    phone: str
    code: int
    expires_at: float  # epoch seconds

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def _as_code(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class OtpStore:
    """Keyed by normalized phone; at most one live code per phone"""

    def put(self, entry: OtpEntry) -> None:
        raise NotImplementedError

    def get(self, phone: str) -> Optional[OtpEntry]:
        raise NotImplementedError

    def consume(self, phone: str, code) -> bool:
        """Delete the entry if it is live and its code equals `code`. Returns whether it did."""
        raise NotImplementedError

    def discard(self, phone: str) -> None:
        raise NotImplementedError


class InMemoryOtpStore(OtpStore):
    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: dict[str, OtpEntry] = {}
        self._lock = Lock()
        self._clock = clock

    def put(self, entry: OtpEntry) -> None:
        with self._lock:
            self._prune(self._clock())
            self._entries[entry.phone] = entry

    def _prune(self, now: float) -> None:
        # Caller holds the lock
        expired = [phone for phone, e in self._entries.items() if e.is_expired(now)]
        for phone in expired:
            del self._entries[phone]

    def get(self, phone: str) -> Optional[OtpEntry]:
        with self._lock:
            entry = self._entries.get(phone)
            if entry and entry.is_expired(self._clock()):
                del self._entries[phone]
                return None
            return entry

    def consume(self, phone: str, code) -> bool:
        claimed = _as_code(code)
        with self._lock:
            entry = self._entries.get(phone)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._entries[phone]
                return False
            if claimed is None or entry.code != claimed:
                return False
            del self._entries[phone]
            return True

    def discard(self, phone: str) -> None:
        with self._lock:
            self._entries.pop(phone, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisOtpStore(OtpStore):
    """One key per phone; Redis enforces the expiry through the key TTL"""

    KEY_PREFIX = "otp:"

    def __init__(self, client: redis.Redis):
        self.client = client

    def _key(self, phone: str) -> str:
        return f"{self.KEY_PREFIX}{phone}"

    def put(self, entry: OtpEntry) -> None:
        ttl = max(int(entry.expires_at - time.time()), 1)
        self.client.set(self._key(entry.phone), str(entry.code), ex=ttl)

    def get(self, phone: str) -> Optional[OtpEntry]:
        key = self._key(phone)
        value = self.client.get(key)
        if value is None:
            return None
        ttl = self.client.ttl(key)
        return OtpEntry(phone=phone, code=int(value), expires_at=time.time() + max(ttl, 0))

    def consume(self, phone: str, code) -> bool:
        claimed = _as_code(code)
        if claimed is None:
            return False
        key = self._key(phone)

        def _compare_and_delete(pipe) -> bool:
            stored = pipe.get(key)
            if stored is None or _as_code(stored) != claimed:
                return False
            pipe.multi()
            pipe.delete(key)
            return True

        return self.client.transaction(_compare_and_delete, key, value_from_callable=True)

    def discard(self, phone: str) -> None:
        self.client.delete(self._key(phone))


otp_store: Optional[OtpStore] = None


def get_otp_store() -> OtpStore:
    """
    Get or create the process-wide OTP store.
    Uses Redis when REDIS_URL is set so codes survive restarts and are shared across workers.
    """
    global otp_store

    if otp_store is None:
        if REDIS_URL:
            logger.info("🔄 Initializing Redis-backed OTP store...")
            client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
                health_check_interval=30,
            )
            otp_store = RedisOtpStore(client)
        else:
            logger.info("Using in-memory OTP store (codes are lost on restart)")
            otp_store = InMemoryOtpStore()

    return otp_store
