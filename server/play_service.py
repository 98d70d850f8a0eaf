"""REST boundary for Ninety-Nine games."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ninetynine.codec import state_to_dict
from ninetynine.errors import GameNotFound, UnknownPlayer
from ninetynine.log import configure_logging
from ninetynine.rules_schema import DEFAULT_RULES, load_rules
from ninetynine.service import ActionResult, GameRegistry

logger = logging.getLogger(__name__)


class ServiceSettings(BaseSettings):
    """Service settings loaded from ``NINETYNINE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="NINETYNINE_", env_file=".env", extra="ignore")

    rules_path: Optional[str] = Field(default=None, description="JSON rules file; built-in rules when unset")
    log_level: str = Field(default="INFO", description="Root log level")
    default_seed: Optional[int] = Field(default=None, description="Seed for rounds started without one")
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS origins")


class CreateGameRequest(BaseModel):
    player_ids: List[str] = Field(min_length=1)


class StartRoundRequest(BaseModel):
    seed: Optional[int] = None


class PlayRequest(BaseModel):
    player_id: str
    card_id: str


class BidRequest(BaseModel):
    player_id: str
    card_ids: List[str]


class DeclareRequest(BaseModel):
    player_id: str
    kind: str


class SyncRequest(BaseModel):
    state: Dict[str, Any]


def _result_payload(result: ActionResult) -> Dict[str, Any]:
    return {
        "accepted": result.accepted,
        "reason": result.reason,
        "winner_id": result.winner_id,
        "state": asdict(result.view),
    }


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    settings = settings or ServiceSettings()
    configure_logging(settings.log_level)
    rules = load_rules(settings.rules_path) if settings.rules_path else DEFAULT_RULES
    # Clients only see the hand of the player they ask for.
    registry = GameRegistry(rules=rules, reveal_hands=False)

    app = FastAPI(title="Ninety-Nine Game Service")
    app.state.registry = registry
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GameNotFound)
    async def game_not_found(request: Request, exc: GameNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": str(exc), "action": "Return to the game list."},
        )

    @app.exception_handler(UnknownPlayer)
    async def unknown_player(request: Request, exc: UnknownPlayer) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.post("/games")
    def create_game(request: CreateGameRequest) -> Dict[str, Any]:
        try:
            game_id = registry.create(request.player_ids)
        except ValueError as exc:
            return JSONResponse(status_code=400, content={"detail": str(exc)})
        return {"game_id": game_id, "state": asdict(registry.get(game_id).get_view())}

    @app.get("/games/{game_id}")
    def get_game(game_id: str, perspective: Optional[str] = None) -> Dict[str, Any]:
        return asdict(registry.get(game_id).get_view(perspective))

    @app.get("/games/{game_id}/state")
    def get_game_state(game_id: str) -> Dict[str, Any]:
        return state_to_dict(registry.get(game_id).store.state)

    @app.delete("/games/{game_id}")
    def delete_game(game_id: str) -> Dict[str, Any]:
        registry.discard(game_id)
        return {"deleted": game_id}

    @app.post("/games/{game_id}/round")
    def start_round(game_id: str, request: StartRoundRequest) -> Dict[str, Any]:
        seed = request.seed if request.seed is not None else settings.default_seed
        return _result_payload(registry.get(game_id).start_round(seed=seed))

    @app.post("/games/{game_id}/play")
    def play_card(game_id: str, request: PlayRequest) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).play_card(request.player_id, request.card_id))

    @app.post("/games/{game_id}/bid")
    def submit_bid(game_id: str, request: BidRequest) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).submit_bid(request.player_id, request.card_ids))

    @app.post("/games/{game_id}/declare")
    def declare(game_id: str, request: DeclareRequest) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).declare(request.player_id, request.kind))

    @app.post("/games/{game_id}/resolve-trick")
    def resolve_trick(game_id: str) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).resolve_trick())

    @app.post("/games/{game_id}/clear-trick")
    def clear_trick(game_id: str) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).clear_trick())

    @app.post("/games/{game_id}/settle")
    def settle(game_id: str) -> Dict[str, Any]:
        return _result_payload(registry.get(game_id).settle_round())

    @app.post("/games/{game_id}/sync")
    async def sync(game_id: str, request: SyncRequest) -> Dict[str, Any]:
        service = registry.get(game_id)
        accepted = await service.sync_remote(request.state)
        return {"accepted": accepted, "state": asdict(service.get_view())}

    return app


app = create_app()
