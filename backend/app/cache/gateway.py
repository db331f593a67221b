"""Redis cache gateway.

Reads and writes never raise: a broken cache behaves like an empty one so
requests fall through to the store. Only :meth:`CacheGateway.ping` reports
failure, because readiness depends on it.

A failed command marks the gateway disconnected. Further commands are
skipped until the backoff delay for that failure has passed, then the next
command retries redis. Once :class:`ReconnectPolicy` is exhausted the gateway
gives up and skips every command until a :meth:`~CacheGateway.ping` or
:meth:`~CacheGateway.connect` succeeds again.
"""
import json
import threading
import time
from typing import Any, Callable, NamedTuple, Optional

import redis
from redis.exceptions import RedisError

from app.config import settings
from app.errors import CacheError
from app.utils.logger import logger


class ReconnectPolicy(NamedTuple):
    """Bounded linear backoff for (re)connecting to redis."""

    max_attempts: int = 10
    max_retry_time: float = 3600.0   # seconds of cumulative retrying
    step: float = 0.1                # 100ms per attempt
    max_delay: float = 3.0

    def next_delay(self, attempt: int, elapsed: float) -> Optional[float]:
        """Seconds to wait before ``attempt``, or None once the budget is spent."""
        if elapsed > self.max_retry_time:
            return None
        if attempt > self.max_attempts:
            return None
        return min(attempt * self.step, self.max_delay)


class CacheGateway:
    """JSON values over a single redis client with TTL-based expiry."""

    def __init__(
        self,
        client: redis.Redis,
        policy: Optional[ReconnectPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._policy = policy or ReconnectPolicy()
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._connected = False
        self._gave_up = False
        self._attempt = 0
        self._outage_started: Optional[float] = None
        self._retry_at = 0.0

    @classmethod
    def from_settings(cls) -> "CacheGateway":
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )
        policy = ReconnectPolicy(
            max_attempts=settings.CACHE_RECONNECT_MAX_ATTEMPTS,
            max_retry_time=settings.CACHE_RECONNECT_MAX_RETRY_SECONDS,
        )
        return cls(client, policy=policy)

    @property
    def connected(self) -> bool:
        return self._connected and not self._gave_up

    @property
    def gave_up(self) -> bool:
        return self._gave_up

    # ------------------------------------------------------------------
    # Connection state
    # ------------------------------------------------------------------

    def _mark_up(self) -> None:
        with self._lock:
            recovered = not self._connected
            self._connected = True
            self._gave_up = False
            self._attempt = 0
            self._outage_started = None
            self._retry_at = 0.0
        if recovered:
            logger.info("Redis client connected")

    def _mark_down(self, exc: Exception) -> Optional[float]:
        """Count a failed attempt; returns the backoff delay or None after giving up."""
        with self._lock:
            now = self._clock()
            if self._outage_started is None:
                self._outage_started = now
            self._connected = False
            self._attempt += 1
            delay = self._policy.next_delay(self._attempt, now - self._outage_started)
            if delay is None:
                self._gave_up = True
            else:
                self._retry_at = now + delay
            attempt = self._attempt

        if delay is None:
            logger.error(
                f"Redis unreachable after {attempt - 1} retries, giving up",
                extra={"error": str(exc)},
            )
        else:
            logger.warning(
                f"Redis attempt {attempt} failed, retrying in {delay:.1f}s",
                extra={"error": str(exc)},
            )
        return delay

    def _usable(self) -> bool:
        if self._gave_up:
            return False
        if self._connected:
            return True
        return self._clock() >= self._retry_at

    def connect(self) -> bool:
        """Ping redis until it answers or the reconnect budget runs out."""
        with self._lock:
            self._gave_up = False
            self._attempt = 0
            self._outage_started = None
        while True:
            try:
                self._client.ping()
            except RedisError as exc:
                delay = self._mark_down(exc)
                if delay is None:
                    return False
                self._sleep(delay)
                continue
            self._mark_up()
            return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[Any]:
        if not self._usable():
            return None
        try:
            raw = self._client.get(key)
        except RedisError as exc:
            logger.error("Cache get error", extra={"cache_key": key, "error": str(exc)})
            self._mark_down(exc)
            return None
        self._mark_up()
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.error("Cache payload is not valid JSON", extra={"cache_key": key, "error": str(exc)})
            return None

    def set(self, key: str, value: Any, ttl: int) -> bool:
        if not self._usable():
            return False
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.error("Cache value is not serializable", extra={"cache_key": key, "error": str(exc)})
            return False
        try:
            self._client.set(key, payload, ex=ttl)
        except RedisError as exc:
            logger.error("Cache set error", extra={"cache_key": key, "error": str(exc)})
            self._mark_down(exc)
            return False
        self._mark_up()
        return True

    def delete(self, key: str) -> bool:
        if not self._usable():
            return False
        try:
            self._client.delete(key)
        except RedisError as exc:
            logger.error("Cache delete error", extra={"cache_key": key, "error": str(exc)})
            self._mark_down(exc)
            return False
        self._mark_up()
        return True

    def exists(self, key: str) -> bool:
        if not self._usable():
            return False
        try:
            found = self._client.exists(key)
        except RedisError as exc:
            logger.error("Cache exists error", extra={"cache_key": key, "error": str(exc)})
            self._mark_down(exc)
            return False
        self._mark_up()
        return bool(found)

    def ping(self) -> bool:
        """Probe redis directly, ignoring backoff; success revives a gateway that gave up."""
        try:
            self._client.ping()
        except RedisError as exc:
            if not self._gave_up:
                self._mark_down(exc)
            raise CacheError("Redis ping failed") from exc
        self._mark_up()
        return True

    def close(self) -> None:
        self._client.close()
        with self._lock:
            self._connected = False
        logger.info("Redis connection closed")
