"""In-memory stand-ins for the Gemini provider used across the test modules."""

import asyncio

from src.config.settings import Settings


def make_config(timeout: float = 5) -> Settings:
	config = Settings()
	config.GEMINI_MODEL = "gemini-test"
	config.MAX_OUTPUT_TOKENS = 128
	config.PROVIDER_TIMEOUT_SECONDS = timeout
	config.SYSTEM_INSTRUCTION = "You are a patient tutor."
	return config

async def fragments(texts, error: Exception | None = None):
	for text in texts:
		yield text
	if error is not None:
		raise error

async def collect(chunks) -> list:
	return [chunk async for chunk in chunks]

class StubProvider:
	"""
	Replays scripted outcomes, one per call. An outcome is a list of text
	fragments to stream, an exception to raise when the call is opened, or
	`FailOnRead(exc)` to raise on the first read. The last outcome repeats.
	"""
	def __init__(self, *outcomes):
		self.outcomes = list(outcomes) or [["ok"]]
		self.calls = []

	async def open_stream(self, api_key, payload):
		self.calls.append((api_key, payload))
		outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
		if isinstance(outcome, Exception):
			raise outcome
		if isinstance(outcome, FailOnRead):
			return fragments([], outcome.error)
		if isinstance(outcome, Hang):
			await asyncio.sleep(outcome.seconds)
		return fragments(outcome)

	@property
	def keys_used(self) -> list:
		return [key for key, _ in self.calls]

class FailOnRead:
	def __init__(self, error: Exception):
		self.error = error

class Hang(list):
	"""Fragments delivered only after sleeping `seconds`."""
	def __init__(self, seconds: float, texts=()):
		super().__init__(texts)
		self.seconds = seconds
