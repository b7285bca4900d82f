# models/chat.py

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.errors import InvalidRequest


class ImageAttachment(BaseModel):
	data: bytes
	mime_type: str

class ConversationTurn(BaseModel):
	"""One prior turn in Gemini wire format. Only the role is checked; parts pass through as sent."""
	model_config = ConfigDict(extra="allow")

	role: Literal["user", "model"]
	parts: list[dict[str, Any]] = Field(default_factory=list)

class ChatRequest(BaseModel):
	prompt: str = ""
	image: ImageAttachment | None = None
	history: list[dict[str, Any]] = Field(default_factory=list)

	@property
	def is_first_turn(self) -> bool:
		return not self.history

class HealthResponse(BaseModel):
	status: str
	timestamp: str
	model: str
	key_pool: dict

def parse_history(raw: str | None) -> list[dict[str, Any]]:
	"""
	Decodes the `history` form field.

	Absent or blank means a new conversation. Anything else must be a JSON
	array of turns with a `user` or `model` role; the original dicts are
	returned unchanged so they reach the provider verbatim.
	"""
	if raw is None or not raw.strip():
		return []
	try:
		turns = json.loads(raw)
	except json.JSONDecodeError as e:
		raise InvalidRequest(f"history is not valid JSON: {e.msg}") from e
	if not isinstance(turns, list):
		raise InvalidRequest("history must be a JSON array")
	try:
		for turn in turns:
			ConversationTurn.model_validate(turn)
	except ValidationError as e:
		raise InvalidRequest(f"history contains an invalid turn: {e.errors()[0]['msg']}") from e
	return turns
