# core/state.py

import threading

from src.config.settings import Settings, settings
from src.services.gemini import GeminiProvider
from src.services.tutor_response import TutorDispatcher
from src.utils.key_pool import KeyPool


class TutorState:
	"""Manages the global state of the application using a Singleton pattern."""
	_instance = None

	def __new__(cls):
		if cls._instance is None:
			cls._instance = super(TutorState, cls).__new__(cls)
			cls._instance._initialized = False
		return cls._instance

	def __init__(self):
		if self._initialized:
			return
		self.config: Settings
		self.provider: GeminiProvider
		self.dispatcher: TutorDispatcher
		self.key_pool: KeyPool | None = None
		self._pool_lock = threading.Lock()
		self._initialized = True

	def initialize(self, config: Settings = settings):
		"""Initializes the provider and dispatcher. The key pool loads on first use."""
		self.config = config
		self.provider = GeminiProvider()
		self.dispatcher = TutorDispatcher(self.get_key_pool, self.provider, config)

	def get_key_pool(self) -> KeyPool:
		"""Loads the process-wide key pool once; raises ConfigurationError while keys are missing."""
		if self.key_pool is None:
			with self._pool_lock:
				if self.key_pool is None:
					self.key_pool = KeyPool.from_env(self.config)
		return self.key_pool

	@classmethod
	def reset(cls):
		"""Drops the singleton so the next access starts from a clean pool."""
		cls._instance = None

def get_state() -> TutorState:
	"""Provides access to the application state, for use as a dependency."""
	return TutorState()
