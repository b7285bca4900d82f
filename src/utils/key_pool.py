# utils/key_pool.py

import threading

from src.config.settings import Settings
from src.core.errors import ConfigurationError
from src.utils.logger import logger


def parse_api_keys(raw: str | None) -> list[str]:
	"""
	Splits a configured key string into clean credentials.

	Accepts a single key or a comma-separated list. Whitespace around each
	piece and any number of leading/trailing double quotes are removed, and
	empty pieces are dropped. Order is preserved.
	"""
	if not raw:
		return []
	pieces = raw.split(",") if "," in raw else [raw]
	keys = []
	for piece in pieces:
		key = piece.strip().strip('"')
		if key:
			keys.append(key)
	return keys

def mask_key(key: str) -> str:
	"""Short fingerprint of a key that is safe to log."""
	if len(key) <= 8:
		return "****"
	return f"{key[:4]}...{key[-4:]}"

class KeyPool:
	"""
	Process-wide pool of Gemini API keys.
	- next_available() picks the key at the cursor, skipping failed ones
	- advance() moves the cursor after a successful call (load balancing)
	- mark_failed() / fail_over() record credential or quota failures
	When every key has failed, the failed set is cleared and the cursor
	returns to 0 so a transient outage never locks the pool for good.

	The lock only guards the cursor and failed set; it is never held while
	a provider call is in flight.
	"""
	def __init__(self, keys: list[str]):
		if not keys:
			raise ConfigurationError("Gemini API keys not configured")
		self.keys: tuple[str, ...] = tuple(keys)
		self.cursor = 0
		self.failed: set[int] = set()
		self._lock = threading.Lock()

	@classmethod
	def from_env(cls, config: Settings | None = None) -> "KeyPool":
		"""Builds the pool from GEMINI_API_KEYS, falling back to GEMINI_API_KEY."""
		config = config or Settings()
		keys = parse_api_keys(config.raw_api_keys())
		if not keys:
			raise ConfigurationError("Gemini API keys not configured")
		logger(tag="KEY_POOL").info(f"Loaded {len(keys)} Gemini API keys.")
		return cls(keys)

	def __len__(self) -> int:
		return len(self.keys)

	def next_available(self) -> tuple[int, str]:
		"""Returns (index, key) for the first usable key at or after the cursor."""
		with self._lock:
			return self._next_available_locked()

	def _next_available_locked(self) -> tuple[int, str]:
		total = len(self.keys)
		for offset in range(total):
			index = (self.cursor + offset) % total
			if index not in self.failed:
				self.cursor = index
				return index, self.keys[index]

		self.failed.clear()
		self.cursor = 0
		logger(tag="KEY_POOL").warning(f"All {total} keys had failed. Resetting pool.")
		return 0, self.keys[0]

	def mark_failed(self, index: int) -> None:
		if not 0 <= index < len(self.keys):
			raise IndexError(f"Key index {index} out of range for pool of {len(self.keys)}")
		with self._lock:
			self.failed.add(index)

	def advance(self) -> None:
		with self._lock:
			self.cursor = (self.cursor + 1) % len(self.keys)

	def is_exhausted(self) -> bool:
		with self._lock:
			return len(self.failed) >= len(self.keys)

	def fail_over(self, index: int) -> tuple[int, str] | None:
		"""
		Marks `index` failed and picks the replacement in one step.

		Returns None when the failure exhausted the pool; the reset then
		happens on the next call to next_available(), not for this request.
		"""
		if not 0 <= index < len(self.keys):
			raise IndexError(f"Key index {index} out of range for pool of {len(self.keys)}")
		with self._lock:
			self.failed.add(index)
			if len(self.failed) >= len(self.keys):
				return None
			return self._next_available_locked()

	def snapshot(self) -> dict:
		with self._lock:
			return {
				"total_keys": len(self.keys),
				"failed_keys": len(self.failed),
				"cursor": self.cursor,
			}
