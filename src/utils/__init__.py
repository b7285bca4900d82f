# ────────────────────────────── utils/__init__.py ──────────────────────────────
"""
AI Tutor Gateway - Utility Package

This package provides:
- The process-wide API key pool (parsing, rotation, failover bookkeeping)
- Structured logging utilities
"""

from .key_pool import KeyPool, mask_key, parse_api_keys
from .logger import logger, setup_logging

__all__ = [
	'KeyPool',
	'mask_key',
	'parse_api_keys',
	'logger',
	'setup_logging'
]

__version__ = "1.0.0"
