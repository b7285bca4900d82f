# services/stream_relay.py

from typing import AsyncIterator, Awaitable, Callable

from src.core.errors import UpstreamError
from src.utils.logger import logger


async def relay_stream(
	chunks: AsyncIterator[str],
	is_disconnected: Callable[[], Awaitable[bool]] | None = None
) -> AsyncIterator[bytes]:
	"""
	Forwards provider text fragments to the caller as UTF-8 bytes.

	Fragments are written one for one, in arrival order. The relay stops early
	if the caller has gone away, and the provider stream is always closed on
	exit. An error after bytes were sent cannot be retracted or retried; it is
	logged and re-raised so the response ends without completing.
	"""
	relayed = 0
	try:
		async for text in chunks:
			if is_disconnected is not None and await is_disconnected():
				logger(tag="RELAY").info(f"Client disconnected after {relayed} chunks, stopping relay")
				return
			yield text.encode("utf-8")
			relayed += 1
	except UpstreamError:
		raise
	except Exception as e:
		logger(tag="RELAY").error(f"Provider stream failed after {relayed} chunks: {e}")
		raise UpstreamError(str(e)) from e
	finally:
		aclose = getattr(chunks, "aclose", None)
		if aclose is not None:
			await aclose()
