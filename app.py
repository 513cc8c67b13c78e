"""
notewise FastAPI Application

Hosts the two AI HTTP functions used by the editor and the flashcard
screen:
- POST /functions/ai-assist: improve / summarize / expand / tone / generate
- POST /functions/generate-flashcards: five question/answer pairs
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from notewise.config import Config
from notewise.core.factory import LLMFactory
from notewise.core.llm.base import LLMProvider
from notewise.models import AssistRequest, ErrorResponse, FlashcardRequest
from notewise.services.ai_assist import AIAssistService, FlashcardGenerator
from notewise.utils.exceptions import NotewiseError, ValidationError
from notewise.utils.logger import get_logger, setup_logging

# Global service instances
llm: LLMProvider | None = None
assist_service: AIAssistService | None = None
flashcard_generator: FlashcardGenerator | None = None
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    llm_configured: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global llm, assist_service, flashcard_generator

    config = Config.from_env()

    setup_logging(config.logging)

    logger.info("Starting notewise AI functions")
    logger.info(f"Configuration: LLM={config.llm.provider}/{config.llm.model}")

    try:
        llm = LLMFactory.create(config.llm)
    except NotewiseError as e:
        # Serve anyway; each call reports the missing provider as an error body
        logger.error(f"LLM provider not available: {e}")
        llm = None

    if llm is not None:
        assist_service = AIAssistService(llm, config.llm)
        flashcard_generator = FlashcardGenerator(llm, config.llm)

    yield

    logger.info("Shutting down notewise AI functions")
    if llm is not None:
        await llm.close()
    llm = assist_service = flashcard_generator = None


app = FastAPI(
    title="notewise AI functions",
    description="AI text assistance and flashcard generation for notewise",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def read_body(request: Request, model: type[BaseModel]) -> BaseModel:
    """Parse the JSON body into a request model; malformed bodies are validation errors."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be JSON") from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid request: {e.errors()[0]['msg']}") from e


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", llm_configured=llm is not None)


@app.post("/functions/ai-assist")
async def ai_assist(request: Request):
    """
    Run an assist action.

    Body: {action?, content?, prompt?}. Replies {result, usage} on success,
    {error} with 400 for invalid input and 500 for everything else.
    """
    try:
        body = await read_body(request, AssistRequest)
        if not body.has_input():
            raise ValidationError("Either prompt or content is required")
        if assist_service is None:
            return error_response("AI provider not configured", 500)

        response = await assist_service.assist(body)
        return response.model_dump()
    except ValidationError as e:
        return error_response(e.message, 400)
    except Exception as e:
        logger.error(f"Error in AI assist function: {e}")
        return error_response(str(e) or "An unexpected error occurred", 500)


@app.post("/functions/generate-flashcards")
async def generate_flashcards(request: Request):
    """
    Generate flashcards.

    Body: {content, difficulty?}. Replies {flashcards: [{question, answer}], usage}.
    """
    try:
        body = await read_body(request, FlashcardRequest)
        if not body.content or not body.content.strip():
            raise ValidationError("Content is required")
        if flashcard_generator is None:
            return error_response("AI provider not configured", 500)

        response = await flashcard_generator.generate(body)
        return response.model_dump()
    except ValidationError as e:
        return error_response(e.message, 400)
    except Exception as e:
        logger.error(f"Error in generate-flashcards function: {e}")
        return error_response(str(e) or "An unexpected error occurred", 500)
