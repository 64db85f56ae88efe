import json
import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from starlette.responses import JSONResponse

from app.core.config import Settings
from schemas.cartoon import ErrorBody, GenerateRequest, GenerateResponse
from services.cartoon_pipeline import CartoonPipeline
from services.errors import InvalidRequestError, classify_error

logger = logging.getLogger(__name__)


def get_cartoon_pipeline(request: Request) -> CartoonPipeline:
    settings: Settings = request.app.state.settings
    return CartoonPipeline.from_settings(settings)


async def _read_payload(request: Request) -> GenerateRequest:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError("Invalid request body") from exc
    if not isinstance(body, dict):
        raise InvalidRequestError("Invalid request body")
    return GenerateRequest.model_validate(body)


def build_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    """Build the cartoon router with its endpoint limited per client address.

    The limit is applied on the route itself because routes mounted through
    ``include_router`` are not visible to ``SlowAPIMiddleware``.
    """
    router = APIRouter(tags=["cartoon"])

    @router.post(
        "/generate",
        response_model=GenerateResponse,
        responses={status: {"model": ErrorBody} for status in (400, 401, 429, 500)},
    )
    @limiter.limit(rate_limit)
    async def generate_cartoon(
        request: Request,
        pipeline: CartoonPipeline = Depends(get_cartoon_pipeline),
    ) -> GenerateResponse | JSONResponse:
        try:
            payload = await _read_payload(request)
            command = payload.to_command()
            result = await pipeline.run(command)
        except InvalidRequestError as exc:
            error = classify_error(exc)
            return JSONResponse(status_code=error.status_code, content={"error": error.message})
        except Exception as exc:  # noqa: BLE001 - every stage failure becomes an error response
            logger.exception("Cartoon generation failed: %s", exc)
            error = classify_error(exc)
            return JSONResponse(status_code=error.status_code, content={"error": error.message})

        return GenerateResponse.from_result(result)

    return router
