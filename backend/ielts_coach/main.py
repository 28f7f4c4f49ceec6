import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import ConfigurationError, InputValidationError, PipelineError
from .settings import settings
from .routers import reading
from .routers import listening
from .routers import writing
from .routers import speaking

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="IELTS Coach API")
app.include_router(reading.router)
app.include_router(listening.router)
app.include_router(writing.router)
app.include_router(speaking.router)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
	logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
	return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
	# The credential gate outranks body decoding, which FastAPI runs before dependencies
	if not settings.openai_api_key:
		error: PipelineError = ConfigurationError("OpenAI API key is not configured")
	else:
		problems = "; ".join(
			f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
			for err in exc.errors()
		)
		error = InputValidationError("Invalid request body", details=problems or None)
	return await pipeline_error_handler(request, error)


@app.get("/info")
def root():
	return {"status": "ok", "openai_configured": bool(settings.openai_api_key)}
