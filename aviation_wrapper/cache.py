from __future__ import annotations

from dataclasses import dataclass
import time
from threading import Lock
from typing import Callable, Dict, Generic, Hashable, Optional, Protocol, TypeVar

from aviation_wrapper.airports import AirportRecord


T = TypeVar("T")


class AirportCache(Protocol):
    def get(self, key: str) -> Optional[AirportRecord]: ...

    def set(self, key: str, value: AirportRecord) -> None: ...

    def expire(self, key: str) -> None: ...


@dataclass(frozen=True)
class _Entry(Generic[T]):
    expires_at: float
    value: T


class _Stripe(Generic[T]):
    def __init__(self) -> None:
        self.lock = Lock()
        self.data: Dict[Hashable, _Entry[T]] = {}


class TTLCache(Generic[T]):
    """In-memory cache with lazy expiry.

    Keys are spread over ``stripes`` independently locked maps, so lookups for
    different keys rarely wait on each other. ``maxsize`` bounds the whole cache.
    """

    def __init__(
        self,
        *,
        default_ttl_seconds: int = 900,
        maxsize: int = 2048,
        stripes: int = 16,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._stripes: list[_Stripe[T]] = [_Stripe() for _ in range(max(1, stripes))]
        self._stripe_maxsize = max(1, maxsize // len(self._stripes))

    def _stripe(self, key: Hashable) -> _Stripe[T]:
        return self._stripes[hash(key) % len(self._stripes)]

    def get(self, key: Hashable) -> Optional[T]:
        now = self._clock()
        stripe = self._stripe(key)
        with stripe.lock:
            entry = stripe.data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                stripe.data.pop(key, None)
                return None
            return entry.value

    def set(self, key: Hashable, value: T, *, ttl_seconds: int | None = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = self._clock() + max(0, ttl)
        stripe = self._stripe(key)
        with stripe.lock:
            if key not in stripe.data and len(stripe.data) >= self._stripe_maxsize:
                self._evict_one_locked(stripe)
            stripe.data[key] = _Entry(expires_at=expires_at, value=value)

    def expire(self, key: Hashable) -> None:
        stripe = self._stripe(key)
        with stripe.lock:
            stripe.data.pop(key, None)

    def clear(self) -> None:
        for stripe in self._stripes:
            with stripe.lock:
                stripe.data.clear()

    def __len__(self) -> int:
        total = 0
        for stripe in self._stripes:
            with stripe.lock:
                total += len(stripe.data)
        return total

    def _evict_one_locked(self, stripe: _Stripe[T]) -> None:
        now = self._clock()
        expired_keys = [k for k, v in stripe.data.items() if v.expires_at <= now]
        for k in expired_keys:
            stripe.data.pop(k, None)
        if len(stripe.data) < self._stripe_maxsize or not stripe.data:
            return
        oldest_key = min(stripe.data.items(), key=lambda kv: kv[1].expires_at)[0]
        stripe.data.pop(oldest_key, None)
