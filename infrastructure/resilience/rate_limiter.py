"""Per-caller daily request budget.

Each key gets ``daily_limit`` requests per rolling window (24h by default). Stale
keys are swept inline, at most once per ``cleanup_interval``, by whichever caller
happens to cross the interval, so no background task is needed.
"""

import logging
import threading
import time
from collections.abc import Callable
from datetime import timedelta

from domain.exceptions.currency import RateLimitExceededError
from domain.models.currency import RateLimitInfo

logger = logging.getLogger(__name__)

DEFAULT_DAILY_LIMIT = 1000
DEFAULT_WINDOW = timedelta(hours=24)
DEFAULT_CLEANUP_INTERVAL = timedelta(minutes=5)
DEFAULT_GRACE_PERIOD = timedelta(hours=1)


class RateLimiter:
	def __init__(
		self,
		daily_limit: int = DEFAULT_DAILY_LIMIT,
		window: timedelta = DEFAULT_WINDOW,
		cleanup_interval: timedelta = DEFAULT_CLEANUP_INTERVAL,
		grace_period: timedelta = DEFAULT_GRACE_PERIOD,
		clock: Callable[[], float] = time.monotonic,
	):
		if daily_limit < 1:
			raise ValueError('daily_limit must be at least 1')
		self.daily_limit = daily_limit
		self._window = window.total_seconds()
		self._cleanup_interval = cleanup_interval.total_seconds()
		self._grace = grace_period.total_seconds()
		self._clock = clock
		self._limits: dict[str, RateLimitInfo] = {}
		self._lock = threading.Lock()
		self._last_cleanup = clock()

	def check_and_increment(self, key: str) -> int:
		"""Consume one request for ``key`` and return how many are left in its window.

		Raises:
		    RateLimitExceededError: the key already used its whole budget. The counter
		        is left untouched.
		"""
		with self._lock:
			now = self._clock()
			self._cleanup_if_needed(now)

			info = self._limits.get(key)
			if info is None or now - info.window_start > self._window:
				info = RateLimitInfo(count=0, window_start=now)

			if info.count >= self.daily_limit:
				self._limits[key] = info
				retry_after = max(0.0, info.window_start + self._window - now)
				logger.warning(f'Rate limit exceeded for key {key}. Daily count: {info.count}')
				raise RateLimitExceededError(
					f'daily limit of {self.daily_limit} requests reached',
					source='local',
					retry_after=retry_after,
				)

			info = RateLimitInfo(count=info.count + 1, window_start=info.window_start)
			self._limits[key] = info

		remaining = self.daily_limit - info.count
		logger.debug(f'Rate limit check passed for key {key}. Daily count: {info.count}/{self.daily_limit}')
		return remaining

	def remaining(self, key: str) -> int:
		with self._lock:
			info = self._limits.get(key)
			if info is None or self._clock() - info.window_start > self._window:
				return self.daily_limit
			return max(0, self.daily_limit - info.count)

	def tracked_keys(self) -> int:
		with self._lock:
			return len(self._limits)

	def _cleanup_if_needed(self, now: float) -> None:
		# Caller holds self._lock
		if now - self._last_cleanup <= self._cleanup_interval:
			return

		cutoff = self._window + self._grace
		stale = [k for k, info in self._limits.items() if now - info.window_start > cutoff]
		for key in stale:
			del self._limits[key]
		self._last_cleanup = now

		if stale:
			logger.debug(f'Rate limiter cleanup removed {len(stale)} stale keys')
