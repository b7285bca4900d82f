# api/routes/chat.py

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from src.core.errors import TutorError
from src.core.state import TutorState, get_state
from src.models.chat import ChatRequest, ImageAttachment, parse_history
from src.services.stream_relay import relay_stream
from src.utils.logger import logger

router = APIRouter(prefix="/api", tags=["Chat"])

STREAM_HEADERS = {
	"Cache-Control": "no-cache",
	"Connection": "keep-alive",
}

async def _read_image(image: UploadFile | None) -> ImageAttachment | None:
	if image is None:
		return None
	data = await image.read()
	# Browsers submit an empty part when no file was picked
	if not data:
		return None
	return ImageAttachment(data=data, mime_type=image.content_type or "application/octet-stream")

@router.post("/gemini")
async def chat_endpoint(
	request: Request,
	prompt: str | None = Form(default=None),
	history: str | None = Form(default=None),
	image: UploadFile | None = File(default=None),
	state: TutorState = Depends(get_state)
):
	"""
	Answer one chat turn, streaming the tutor's reply as it is generated.

	Errors are returned as JSON `{"error", "code"}` with 400 (invalid request),
	500 (configuration or upstream failure) or 503 (no usable API key).
	"""
	try:
		chat_request = ChatRequest(
			prompt=prompt or "",
			image=await _read_image(image),
			history=parse_history(history),
		)
		logger().info(
			f"POST /api/gemini first_turn={chat_request.is_first_turn} "
			f"history={len(chat_request.history)} image={chat_request.image is not None}"
		)
		chunks = await state.dispatcher.handle(chat_request)
	except TutorError as e:
		logger().warning(f"Chat turn failed [{e.code}]: {e.message}")
		return JSONResponse(status_code=e.status_code, content=e.to_payload())
	except Exception as e:
		logger().error(f"Error in chat endpoint: {e}")
		return JSONResponse(
			status_code=500,
			content={"error": f"Internal Server Error: {e}", "code": "internal_error"}
		)

	return StreamingResponse(
		relay_stream(chunks, request.is_disconnected),
		media_type="text/event-stream",
		headers=STREAM_HEADERS,
	)
