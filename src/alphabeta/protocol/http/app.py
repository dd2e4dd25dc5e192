from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    search_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, SearchSession
from ...errors import ConfigurationError, SearchError
from ...games import GAMES, create_game
from ...search.deepening import DeepeningResult
from ...search.prediction import Prediction
from ...search.service import AlphaBeta
from ...search.stepper import Scheduler, Task, asyncio_scheduler


logger = logging.getLogger(__name__)


class CreateSearchRequest(BaseModel):
    game: str = Field(..., description="Bundled game name, e.g. chomp")
    depth: int = Field(default=1, ge=0, le=64)
    max_depth: Optional[int] = Field(default=None, ge=0, le=64)
    params: Dict[str, Any] = Field(default_factory=dict)


class CreateSearchResponse(BaseModel):
    search_id: str
    game: str
    depth: int
    state: Dict[str, Any]


class RunRequest(BaseModel):
    mode: Literal["complete", "budget", "deepen"] = "complete"
    budget_ms: int = Field(default=100, ge=0, le=60_000)


def create_app() -> FastAPI:
    app = FastAPI(title="Alpha-Beta Search API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SearchError, search_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/games")
    async def list_games() -> Dict[str, List[str]]:
        return {"games": sorted(GAMES)}

    @app.post("/api/searches", response_model=CreateSearchResponse)
    async def create_search(req: CreateSearchRequest) -> CreateSearchResponse:
        if req.game not in GAMES:
            raise HTTPException(status_code=404, detail="game not found")
        if req.max_depth is not None and req.max_depth < req.depth:
            raise ConfigurationError("max_depth must be >= depth")
        model = create_game(req.game, req.params)
        state = model.initial_state()
        search = AlphaBeta(model, max_depth=req.max_depth).setup(state=state, depth=req.depth)
        search_id = store.create(
            SearchSession(
                game=req.game, params=dict(req.params), state=state, depth=req.depth, search=search
            )
        )
        logger.info("search created", extra={"search_id": search_id, "game": req.game})
        return CreateSearchResponse(
            search_id=search_id, game=req.game, depth=req.depth, state=_encode(state)
        )

    @app.get("/api/searches/{search_id}")
    async def get_search(search_id: str) -> Dict[str, Any]:
        session = _require_session(store, search_id)
        search = session.search
        deepening = search.session
        return {
            "search_id": search_id,
            "game": session.game,
            "params": session.params,
            "state": _encode(session.state),
            "depth": session.depth,
            "complete": search.engine.is_complete,
            "busy": search.engine.busy,
            "completed_depth": (
                deepening.completed.depth
                if deepening is not None and deepening.completed is not None
                else None
            ),
        }

    @app.post("/api/searches/{search_id}/run")
    async def run_search(search_id: str, req: RunRequest) -> Dict[str, Any]:
        session = _require_session(store, search_id)
        search = session.search
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()
        start = time.perf_counter()

        if req.mode == "deepen":
            deepening = search.increment_depth_for_budget(
                req.budget_ms, done.set_result, scheduler=_guarded_scheduler(loop, done)
            )
            result: DeepeningResult = await done
            return {
                "mode": req.mode,
                "best_move": _encode(result.best()),
                "score": result.best_score(),
                "prediction": _encode_prediction(result.prediction()),
                "depth": result.depth,
                "incomplete_depth": result.incomplete.depth if result.incomplete else None,
                "stats": asdict(result.engine.stats) if result.engine is not None else None,
                "iterations": list(deepening.history),
                "time_ms": result.time_ms,
            }

        if req.mode == "budget":
            search.step_for_budget(
                req.budget_ms, done.set_result, scheduler=_guarded_scheduler(loop, done)
            )
        else:
            search.run_to_completion(done.set_result)
        best = await done
        return {
            "mode": req.mode,
            "best_move": _encode(best),
            "score": search.best_score(),
            "prediction": _encode_prediction(search.prediction()),
            "depth": search.depth,
            "stats": asdict(search.engine.stats),
            "time_ms": int((time.perf_counter() - start) * 1000),
        }

    @app.delete("/api/searches/{search_id}")
    async def delete_search(search_id: str) -> Dict[str, bool]:
        session = _require_session(store, search_id)
        if session.search.engine.busy:
            raise HTTPException(status_code=409, detail="search is running")
        store.delete(search_id)
        return {"deleted": True}

    return app


def _require_session(store: InMemorySessionStore, search_id: str) -> SearchSession:
    session = store.get(search_id)
    if session is None:
        raise HTTPException(status_code=404, detail="search not found")
    return session


def _guarded_scheduler(loop: asyncio.AbstractEventLoop, done: asyncio.Future) -> Scheduler:
    """Run slices on `loop`; an error in a later slice fails `done`."""
    schedule = asyncio_scheduler(loop)

    def run(task: Task) -> None:
        def guarded() -> None:
            try:
                task()
            except Exception as exc:
                if done.done():
                    raise
                done.set_exception(exc)

        schedule(guarded)

    return run


def _encode(state: Any) -> Any:
    if state is None:
        return None
    if is_dataclass(state) and not isinstance(state, type):
        return asdict(state)
    return state


def _encode_prediction(prediction: Prediction) -> List[Any]:
    return [_encode(s) for s in prediction.chain]


# Default app for non-factory servers
app = create_app()
