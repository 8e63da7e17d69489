"""HTTP surface: decodes requests and relays the placement service's outcome."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from place_core.pixels import Pixel
from place_core.protocol import MAX_INDEX
from place_server.config import ServerConfig
from place_server.limiter import RateLimiter
from place_server.service import Outcome, PlacementService
from place_server.storage import BoardStore, DiffLog


class PlaceRequestBody(BaseModel):
    pixel: Pixel
    index: int = Field(strict=True, ge=0, le=MAX_INDEX)


def _respond(outcome: Outcome) -> PlainTextResponse:
    return PlainTextResponse(outcome.message, status_code=int(outcome.status))


def build_service(config: ServerConfig) -> PlacementService:
    return PlacementService(
        BoardStore(config.board_path),
        DiffLog(config.diff_path, durable=config.durable),
        RateLimiter(config.cooldown),
    )


def create_app(config: ServerConfig | None = None, service: PlacementService | None = None) -> FastAPI:
    if service is None:
        service = build_service(config or ServerConfig())

    app = FastAPI(title="Pixel Place")
    app.state.service = service

    # Plain def handlers run in the threadpool; file I/O blocks the worker, not the loop
    @app.get("/v1/board", response_class=PlainTextResponse)
    def board():
        return _respond(service.read_board())

    @app.post("/v1/submit", response_class=PlainTextResponse)
    def submit(body: PlaceRequestBody, request: Request):
        caller = request.client.host if request.client else ""
        return _respond(service.submit(body.pixel, body.index, caller))

    return app
