# services/tutor_response.py

import asyncio
from typing import AsyncIterator, Callable, Protocol

from src.config.settings import Settings
from src.core.errors import (InvalidRequest, PoolExhausted, TutorError,
                             UpstreamError)
from src.models.chat import ChatRequest
from src.services.gemini import ProviderPayload, build_payload, is_retryable
from src.utils.key_pool import KeyPool, mask_key
from src.utils.logger import logger

POOL_EXHAUSTED_MESSAGE = (
	"No available API keys. Please enable Generative Language API for each key's project or wait for quota reset."
)

class StreamingProvider(Protocol):
	async def open_stream(self, api_key: str, payload: ProviderPayload) -> AsyncIterator[str]: ...

class TutorDispatcher:
	"""
	Runs one chat turn: picks a key, calls the provider, and fails over once.

	Only failures that look credential- or quota-related (see `is_retryable`)
	trigger the single retry with the next available key. The pool's cursor
	advances as soon as a stream has started, not when it finishes.
	"""
	def __init__(
		self,
		pool_loader: Callable[[], KeyPool],
		provider: StreamingProvider,
		config: Settings
	):
		self._pool_loader = pool_loader
		self._provider = provider
		self._config = config

	async def handle(self, request: ChatRequest) -> AsyncIterator[str]:
		if not request.prompt and request.image is None:
			raise InvalidRequest("No prompt or image file provided")

		pool = self._pool_loader()
		index, key = pool.next_available()
		logger(tag="DISPATCH").info(f"Using API key index: {index} (total keys: {len(pool)})")

		try:
			stream = await self._attempt(key, build_payload(request, self._config))
		except TutorError:
			raise
		except Exception as e:
			message = str(e)
			if not is_retryable(message):
				logger(tag="DISPATCH").error(f"Non-retryable provider error with key {mask_key(key)}: {message}")
				raise UpstreamError(message) from e

			logger(tag="DISPATCH").warning(f"Retryable error on key index {index}, marking it failed: {message}")
			replacement = pool.fail_over(index)
			if replacement is None:
				logger(tag="DISPATCH").error(f"All {len(pool)} keys have failed")
				raise PoolExhausted(POOL_EXHAUSTED_MESSAGE) from e

			index, key = replacement
			logger(tag="DISPATCH").info(f"Retrying with key index: {index}")
			try:
				stream = await self._attempt(key, build_payload(request, self._config))
			except TutorError:
				raise
			except Exception as retry_error:
				retry_message = str(retry_error)
				logger(tag="DISPATCH").error(f"Retry also failed: {retry_message}")
				raise UpstreamError(retry_message, retryable=is_retryable(retry_message)) from retry_error

		pool.advance()
		return stream

	async def _attempt(self, key: str, payload: ProviderPayload) -> AsyncIterator[str]:
		"""
		Opens the provider stream and waits for it to begin.

		Waiting for the first fragment means errors the SDK only raises on
		first read are still handled by the failover above.
		"""
		async def start() -> AsyncIterator[str]:
			chunks = await self._provider.open_stream(key, payload)
			try:
				first = await chunks.__anext__()
			except StopAsyncIteration:
				return _prepend(None, chunks)
			except BaseException:
				await _close(chunks)
				raise
			return _prepend(first, chunks)

		timeout = self._config.PROVIDER_TIMEOUT_SECONDS
		try:
			return await asyncio.wait_for(start(), timeout=timeout)
		except asyncio.TimeoutError as e:
			raise UpstreamError(f"Gemini did not start responding within {timeout}s") from e

async def _prepend(first: str | None, rest: AsyncIterator[str]) -> AsyncIterator[str]:
	try:
		if first is not None:
			yield first
		async for text in rest:
			yield text
	finally:
		await _close(rest)

async def _close(chunks: AsyncIterator[str]) -> None:
	aclose = getattr(chunks, "aclose", None)
	if aclose is not None:
		await aclose()
