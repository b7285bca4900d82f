# main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from src.utils.logger import logger, setup_logging

# Needs to be called before any logs are sent
setup_logging()

# Load environment variables from .env file
try:
	from dotenv import load_dotenv
	load_dotenv()
	logger(tag="env").info("Environment variables loaded from .env file")
except Exception as e:
	logger(tag="env").warning(f"Error loading .env file: {e}")

# Import project modules after loading environment variables, settings read them at import
from src.api.routes import chat as chat_route
from src.api.routes import system as system_route
from src.config.settings import settings
from src.core.errors import ConfigurationError
from src.core.state import TutorState, get_state


def startup_event(state: TutorState):
	"""Initialize application on startup"""
	logger(tag="startup").info("Starting AI Tutor gateway...")
	logger(tag="startup").info(f"Model: {state.config.GEMINI_MODEL}, max output tokens: {state.config.MAX_OUTPUT_TOKENS}")

	# Check API keys. Missing keys are only fatal for chat requests, so keep serving.
	try:
		pool = state.get_key_pool()
		logger(tag="startup").info(f"{len(pool)} Gemini API keys available")
	except ConfigurationError:
		logger(tag="startup").warning(
			f"No Gemini API keys found! Set {settings.API_KEYS_ENV} (comma-separated) or {settings.API_KEY_FALLBACK_ENV}."
		)

	logger(tag="startup").info("AI Tutor gateway startup complete")

def shutdown_event():
	"""Cleanup on shutdown"""
	logger(tag="shutdown").info("Shutting down AI Tutor gateway...")

@asynccontextmanager
async def lifespan(app: FastAPI):
	# Initialize state
	state = get_state()
	state.initialize(settings)

	startup_event(state)
	yield
	shutdown_event()

# Initialize FastAPI app
app = FastAPI(
	lifespan=lifespan,
	title="AI Tutor Gateway",
	description="Streams tutoring answers from Gemini with API key rotation and failover",
	version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.ALLOWED_ORIGINS,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Include routers
app.include_router(chat_route.router)
app.include_router(system_route.router)

@app.get("/api/info")
async def get_api_info():
	"""Get API information and capabilities, lists all paths available in the api."""
	return {
		"name": "AI Tutor Gateway",
		"version": "1.0.0",
		"description": "Streams tutoring answers from Gemini with API key rotation and failover",
		"features": [
			"Problem image upload on the first turn",
			"Conversation history pass-through",
			"Token-by-token streaming responses",
			"API key rotation",
			"One-shot failover on quota and credential errors"
		],
		"endpoints": [route.path for route in app.routes if isinstance(route, APIRoute)]
	}
