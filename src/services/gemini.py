# services/gemini.py

import threading
from dataclasses import dataclass
from typing import Any, AsyncIterator

from google import genai
from google.genai import types

from src.config.settings import Settings
from src.models.chat import ChatRequest

# Failures that point at the credential or its quota, so another key may succeed.
RETRYABLE_SIGNALS: tuple[str, ...] = (
	"429",
	"too many requests",
	"quota",
	"service_disabled",
	"generative language api has not been used",
	"permission_denied",
	"api key not valid",
	"invalid api key",
	"request had insufficient authentication scopes",
)

def is_retryable(message: str | None) -> bool:
	"""
	Case-insensitive check of a provider error message against RETRYABLE_SIGNALS.

	Malformed requests, internal provider errors and network failures do not
	match: switching keys cannot fix them.
	"""
	if not message:
		return False
	lowered = message.lower()
	return any(signal in lowered for signal in RETRYABLE_SIGNALS)

@dataclass
class ProviderPayload:
	model: str
	contents: list[dict[str, Any]]
	max_output_tokens: int

def build_contents(request: ChatRequest, config: Settings) -> list[dict[str, Any]]:
	"""
	Prior turns followed by the new user turn.

	The image and the tutoring instruction are only sent on the first turn;
	later turns rely on the provider already having them through history.
	"""
	parts: list[dict[str, Any]] = []
	if request.is_first_turn:
		if request.image is not None:
			parts.append({
				"inline_data": {
					"data": request.image.data,
					"mime_type": request.image.mime_type,
				}
			})
		parts.append({"text": config.SYSTEM_INSTRUCTION})
	parts.append({"text": request.prompt})

	return [*request.history, {"role": "user", "parts": parts}]

def build_payload(request: ChatRequest, config: Settings) -> ProviderPayload:
	return ProviderPayload(
		model=config.GEMINI_MODEL,
		contents=build_contents(request, config),
		max_output_tokens=config.MAX_OUTPUT_TOKENS,
	)

class GeminiProvider:
	"""Streams completions from Gemini through the google-genai SDK, one cached client per key."""

	def __init__(self):
		self._clients: dict[str, genai.Client] = {}
		self._lock = threading.Lock()

	def _client_for(self, api_key: str) -> genai.Client:
		with self._lock:
			client = self._clients.get(api_key)
			if client is None:
				client = genai.Client(api_key=api_key)
				self._clients[api_key] = client
			return client

	async def open_stream(self, api_key: str, payload: ProviderPayload) -> AsyncIterator[str]:
		"""Starts a streaming call and returns its text fragments as they arrive."""
		client = self._client_for(api_key)
		response = await client.aio.models.generate_content_stream(
			model=payload.model,
			contents=payload.contents,
			config=types.GenerateContentConfig(
				max_output_tokens=payload.max_output_tokens,
			),
		)
		return _texts(response)

async def _texts(response) -> AsyncIterator[str]:
	try:
		async for chunk in response:
			# Chunks without text (usage metadata, safety info) carry nothing to relay
			if chunk.text:
				yield chunk.text
	finally:
		aclose = getattr(response, "aclose", None)
		if aclose is not None:
			await aclose()
