# api/routes/system.py

import time

from fastapi import APIRouter, Depends

from src.core.errors import ConfigurationError
from src.core.state import TutorState, get_state
from src.models.chat import HealthResponse

router = APIRouter(prefix="/system", tags=["System"])

@router.get("/health", response_model=HealthResponse)
async def health_check(state: TutorState = Depends(get_state)):
	"""Health check endpoint. Reports key pool counters, never the keys themselves."""
	try:
		pool = {"configured": True, **state.get_key_pool().snapshot()}
		status = "healthy"
	except ConfigurationError:
		pool = {"configured": False, "total_keys": 0, "failed_keys": 0, "cursor": 0}
		status = "misconfigured"

	return HealthResponse(
		status=status,
		timestamp=time.strftime("%Y-%m-%d %H:%M:%S"),
		model=state.config.GEMINI_MODEL,
		key_pool=pool,
	)
