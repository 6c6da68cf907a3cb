import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime


@dataclass(frozen=True)
class UsageStats:
	total_requests: int = 0
	successful_requests: int = 0
	cache_hits: int = 0
	api_calls: int = 0
	errors: int = 0
	last_reset: datetime | None = None


class UsageMonitor:
	def __init__(self):
		self._lock = threading.Lock()
		self._stats = UsageStats(last_reset=datetime.now(UTC))

	def record_request(self) -> None:
		with self._lock:
			self._stats = replace(self._stats, total_requests=self._stats.total_requests + 1)

	def record_rate_lookup(self, cached: bool) -> None:
		with self._lock:
			self._stats = replace(
				self._stats,
				cache_hits=self._stats.cache_hits + (1 if cached else 0),
				api_calls=self._stats.api_calls + (0 if cached else 1),
			)

	def record_success(self) -> None:
		with self._lock:
			self._stats = replace(self._stats, successful_requests=self._stats.successful_requests + 1)

	def record_error(self) -> None:
		with self._lock:
			self._stats = replace(self._stats, errors=self._stats.errors + 1)

	def snapshot(self) -> UsageStats:
		with self._lock:
			return self._stats

	def reset(self) -> None:
		with self._lock:
			self._stats = UsageStats(last_reset=datetime.now(UTC))
