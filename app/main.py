"""
Steam Stats View - Main FastAPI Application
Player stats, game summaries and hydrated Dota live matches from the Steam Web API
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from app import catalog
from app.cache import get_cache_manager
from app.db import init_db
from app.errors import MissingApiKeyError, NotFoundError, SteamStatsError, UpstreamError
from app.game_stats import GameStatsService, get_game_stats_service
from app.live_match import LiveMatchProvider, get_live_match_provider
from app.schemas import PlayerSnapshot, PlayerSnapshotList

logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v0.3.0"
APP_NAME = "Steam Stats View"
SERVICE_NAME = "steam-stats-view"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=APP_NAME,
    description="Steam player stats, game summaries and live Dota matches",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(SteamStatsError)
def steam_stats_error_handler(request: Request, exc: SteamStatsError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def error_response(code: str, exc: Exception, status_code: int = 500) -> JSONResponse:
    """Render the ``{error, message}`` envelope for an unexpected failure."""
    return JSONResponse(status_code=status_code, content={"error": code, "message": str(exc)})


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": SERVICE_NAME}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}",
    }


@app.get("/cache/stats")
def cache_stats(provider: LiveMatchProvider = Depends(get_live_match_provider)):
    """Response cache statistics plus league/team metadata cache sizes."""
    return {
        "responses": get_cache_manager().get_stats(),
        "live_metadata": provider.get_cache_stats(),
    }


# ===== DOTA LIVE =====

@app.get("/live/dota/featured")
def live_dota_featured(provider: LiveMatchProvider = Depends(get_live_match_provider)):
    """
    Featured live Dota matches with league and team names resolved.

    Returns {count, items}; an empty feed (including an upstream 404) is
    a normal empty result.
    """
    try:
        matches = provider.get_featured_matches()
    except UpstreamError as e:
        logger.error(f"Live feed unavailable: {e}")
        return error_response("failed_to_fetch_live", e)

    items = [m.to_dict() for m in matches]
    return {"count": len(items), "items": items}


@app.get("/live/dota/matches/{match_id}")
def live_dota_match(match_id: int, provider: LiveMatchProvider = Depends(get_live_match_provider)):
    """A single featured live match, hydrated. 404 when it is not in the feed."""
    try:
        match = provider.get_match(match_id)
    except UpstreamError as e:
        logger.error(f"Live feed unavailable: {e}")
        return error_response("failed_to_fetch_live", e)

    return {"item": match.to_dict()}


# ===== GAMES =====

@app.get("/games")
def list_games(q: Optional[str] = Query(None, description="Name or genre filter")):
    """Featured game catalog, optionally filtered."""
    items = catalog.list_games(q)
    return {"count": len(items), "items": items}


@app.get("/search")
def search_games(q: Optional[str] = Query(None, description="Search query")):
    """Search the catalog by name, developer, publisher, genre or tag."""
    if not q or not q.strip():
        return JSONResponse(
            status_code=400,
            content={"error": "missing_query", "message": "Query parameter 'q' is required."},
        )
    items = catalog.search_games(q)
    return {"count": len(items), "items": items}


@app.get("/games/{app_id}")
def get_catalog_game(app_id: str):
    game = catalog.get_game(app_id)
    if game is None:
        raise NotFoundError(f"Game {app_id} is not in the catalog")
    return {"item": game}


@app.get("/games/{app_id}/summary")
def game_summary(
    app_id: str,
    service: GameStatsService = Depends(get_game_stats_service),
):
    """Store summary for an app, with its current player count."""
    try:
        summary, meta = service.get_game_summary(app_id)
        return {"item": summary, "meta": meta.to_dict()}
    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Game summary failed for {app_id}: {e}")
        return error_response("failed_to_fetch_game", e)


# ===== PLAYERS =====

@app.get("/players/{steam_id}/stats")
def player_stats(
    steam_id: str,
    service: GameStatsService = Depends(get_game_stats_service),
):
    """Profile, playtime totals, top and recent games for a player."""
    try:
        stats, meta = service.get_player_stats(steam_id)
        return {"item": stats, "meta": meta.to_dict()}
    except MissingApiKeyError:
        raise
    except Exception as e:
        logger.error(f"Player stats failed for {steam_id}: {e}")
        return error_response("failed_to_fetch_player", e)


@app.get("/players/{steam_id}/snapshots", response_model=PlayerSnapshotList)
def player_snapshots(
    steam_id: str,
    limit: int = Query(20, ge=1, le=100, description="Max snapshots"),
    service: GameStatsService = Depends(get_game_stats_service),
):
    """Stored stats snapshots for a player, newest first."""
    rows = service.list_player_snapshots(steam_id, limit=limit)
    items = [PlayerSnapshot.model_validate(r) for r in rows]
    return PlayerSnapshotList(count=len(items), items=items)
