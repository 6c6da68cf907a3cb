import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, TypeVar

from domain.models.currency import CacheEntry, CountryInfo, ExchangeRateData

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class CacheStats:
	size: int
	max_size: int
	hits: int
	misses: int
	evictions: int

	@property
	def hit_rate(self) -> float:
		total = self.hits + self.misses
		return self.hits / total if total else 0.0


class MemoryCache(Generic[T]):
	"""In-process TTL cache bounded by entry count.

	When a new key would push the cache past ``max_size`` the least-recently-inserted
	entry is evicted. Expired entries read as misses and are dropped on access.
	"""

	def __init__(
		self,
		ttl: timedelta,
		max_size: int,
		name: str = 'cache',
		clock: Callable[[], float] = time.monotonic,
	):
		if max_size < 1:
			raise ValueError('max_size must be at least 1')
		self.ttl = ttl
		self.max_size = max_size
		self.name = name
		self._ttl_seconds = ttl.total_seconds()
		self._clock = clock
		self._store: OrderedDict[str, CacheEntry[T]] = OrderedDict()
		self._lock = threading.Lock()
		self._hits = 0
		self._misses = 0
		self._evictions = 0

	@classmethod
	def for_countries(cls, ttl: timedelta = timedelta(hours=24), max_size: int = 500, **kwargs) -> 'MemoryCache[CountryInfo]':
		return cls(ttl=ttl, max_size=max_size, name='countries', **kwargs)

	@classmethod
	def for_rates(cls, ttl: timedelta = timedelta(hours=1), max_size: int = 1000, **kwargs) -> 'MemoryCache[ExchangeRateData]':
		return cls(ttl=ttl, max_size=max_size, name='rates', **kwargs)

	def get(self, key: str) -> T | None:
		with self._lock:
			entry = self._store.get(key)
			if entry is not None and entry.is_expired(self._ttl_seconds, self._clock()):
				del self._store[key]
				entry = None
				logger.debug(f'{self.name}: dropped expired entry {key}')

			if entry is None:
				self._misses += 1
				logger.debug(f'{self.name}: cache miss for {key}')
				return None

			self._hits += 1
			logger.debug(f'{self.name}: cache hit for {key}')
			return entry.value

	def set(self, key: str, value: T) -> None:
		with self._lock:
			if key in self._store:
				del self._store[key]
			elif len(self._store) >= self.max_size:
				evicted_key, _ = self._store.popitem(last=False)
				self._evictions += 1
				logger.debug(f'{self.name}: at max size ({self.max_size}), evicted {evicted_key}')

			self._store[key] = CacheEntry(value=value, inserted_at=self._clock())

	def clear_expired(self) -> int:
		with self._lock:
			now = self._clock()
			expired = [k for k, e in self._store.items() if e.is_expired(self._ttl_seconds, now)]
			for key in expired:
				del self._store[key]

		if expired:
			logger.debug(f'{self.name}: cleared {len(expired)} expired entries')
		return len(expired)

	def clear(self) -> None:
		with self._lock:
			self._store.clear()

	def stats(self) -> CacheStats:
		with self._lock:
			return CacheStats(
				size=len(self._store),
				max_size=self.max_size,
				hits=self._hits,
				misses=self._misses,
				evictions=self._evictions,
			)

	def __len__(self) -> int:
		with self._lock:
			return len(self._store)
