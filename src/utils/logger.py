# utils/logger.py

import logging
import os
import sys

# [module:TAG], e.g. [src.services.tutor_response:DISPATCH]
_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s  \t[%(name)s%(tag)s]  \t%(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_QUIET_LOGGERS = ("httpx", "httpcore", "google_genai")

class TaggedFormatter(logging.Formatter):
	"""Fills in an empty tag for records logged outside `logger()`, such as uvicorn's."""
	def __init__(
		self,
		fmt=_DEFAULT_FORMAT,
		datefmt=_DEFAULT_DATE_FORMAT,
		**kwargs
	):
		super().__init__(fmt, datefmt, **kwargs)

	def format(self, record: logging.LogRecord) -> str:
		if not hasattr(record, 'tag'):
			record.tag = ""
		return super().format(record)

def _level_from_env(default: int = logging.INFO) -> int:
	name = os.getenv("LOG_LEVEL", "").strip().upper()
	if not name:
		return default
	level = logging.getLevelName(name)
	return level if isinstance(level, int) else default

def _has_tagged_handler(root: logging.Logger) -> bool:
	return any(isinstance(h.formatter, TaggedFormatter) for h in root.handlers)

def setup_logging(
	level: int | None = None,
	stream=sys.stdout
) -> None:
	"""
	Installs the gateway's tagged stream handler on the root logger.

	Runs once per process; later calls are no-ops. Handlers installed by
	someone else (uvicorn, a test runner) do not prevent ours. The level
	defaults to LOG_LEVEL, else INFO.
	"""
	root = logging.getLogger()
	if _has_tagged_handler(root):
		return

	handler = logging.StreamHandler(stream=stream)
	handler.setFormatter(TaggedFormatter())
	root.addHandler(handler)
	root.setLevel(level if level is not None else _level_from_env())

	for quiet in _QUIET_LOGGERS:
		logging.getLogger(quiet).setLevel(logging.WARNING)
	root.info("Logger set up")

def logger(
	tag: str | None = None,
	*,
	name: str | None = None
) -> logging.LoggerAdapter:
	"""
	Returns an adapter that stamps `tag` on every record.

	The logger is named after the calling module unless `name` is given:
	`logger(tag="DISPATCH").info("Using key 1/3")` inside
	src/services/tutor_response.py prints `[src.services.tutor_response:DISPATCH]`.
	"""
	if name is None:
		name = sys._getframe(1).f_globals.get("__name__", "unknown_module")
	return logging.LoggerAdapter(
		logging.getLogger(name),
		{"tag": f":{tag}" if tag is not None else ""}
	)
