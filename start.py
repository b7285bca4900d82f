#!/usr/bin/env python3
"""
AI Tutor Gateway - Startup Script
Simple script to start the tutoring chat gateway locally
"""

import os
import sys

import uvicorn
from dotenv import load_dotenv

# Settings read the environment at import time
load_dotenv()

from src.config.settings import settings  # noqa: E402
from src.utils.key_pool import parse_api_keys  # noqa: E402


def main():
	"""Start the AI Tutor gateway"""
	print("AI Tutor Gateway")
	print("=" * 50)

	# Check we're in the project root
	if not os.path.exists(os.path.join("src", "main.py")):
		print("Error: src/main.py not found!")
		print("Please run this script from the project root directory.")
		sys.exit(1)

	keys = parse_api_keys(settings.raw_api_keys())
	if not keys:
		print("Warning: No Gemini API keys found!")
		print(f"Set {settings.API_KEYS_ENV}=key1,key2,... (or {settings.API_KEY_FALLBACK_ENV}) before sending chat requests.")
	else:
		print(f"Found {len(keys)} Gemini API keys")

	port = int(os.getenv("PORT", "7860"))
	print(f"\nChat endpoint: http://localhost:{port}/api/gemini")
	print(f"Health check:  http://localhost:{port}/system/health")
	print("\nPress Ctrl+C to stop the server")
	print("=" * 50)

	uvicorn.run(
		"src.main:app",
		host="0.0.0.0",
		port=port,
		log_level="info",
		reload=os.getenv("RELOAD", "false").lower() == "true"
	)

if __name__ == "__main__":
	main()
