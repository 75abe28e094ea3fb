from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from playfeed.api.deps import get_redis, get_settings, get_surface_pool
from playfeed.api.models import (
    BestScore,
    BestScoresResponse,
    FeedGenerateRequest,
    FeedResponse,
    FeedWindowRequest,
    InjectRequest,
    LoadedResponse,
    PoolEntryView,
    PoolSnapshot,
    PreloadRequest,
    PreloadResponse,
    ScrollModeRequest,
    SurfaceMessageRequest,
)
from playfeed.feed import generate_feed, sync_feed_window
from playfeed.pool.manager import SurfaceNotFoundError, SurfacePoolManager
from playfeed.scores import get_best_score, list_best_scores, read_surface_events
from playfeed.settings import PoolSettings
from playfeed.websocket_hub import ALL_SURFACES, hub

router = APIRouter()


async def _subscribe(websocket: WebSocket, topic: str) -> None:
    await hub.connect(topic, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(topic, websocket)
    except Exception:
        await hub.disconnect(topic, websocket)
        raise


@router.websocket("/ws/messages")
async def all_messages_ws(websocket: WebSocket) -> None:
    await _subscribe(websocket, ALL_SURFACES)


@router.websocket("/ws/surface/{game_id}")
async def surface_messages_ws(websocket: WebSocket, game_id: str) -> None:
    await _subscribe(websocket, game_id)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


# -- pool ---------------------------------------------------------------------


@router.get("/pool", response_model=PoolSnapshot)
async def pool_snapshot_route(pool: SurfacePoolManager = Depends(get_surface_pool)) -> PoolSnapshot:
    return pool.snapshot()


@router.post("/pool/preload", response_model=PreloadResponse)
async def preload_route(payload: PreloadRequest, pool: SurfacePoolManager = Depends(get_surface_pool)) -> PreloadResponse:
    admitted = pool.preload(payload.game_id, payload.url)
    return PreloadResponse(admitted=admitted, pool=pool.snapshot())


@router.post("/pool/active/{game_id}", response_model=PoolSnapshot)
async def set_active_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> PoolSnapshot:
    try:
        pool.set_active(game_id)
    except SurfaceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return pool.snapshot()


@router.put("/pool/scroll_mode", response_model=PoolSnapshot)
async def scroll_mode_route(payload: ScrollModeRequest, pool: SurfacePoolManager = Depends(get_surface_pool)) -> PoolSnapshot:
    pool.set_scroll_mode(payload.enabled)
    return pool.snapshot()


@router.get("/pool/{game_id}", response_model=PoolEntryView)
async def get_entry_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> PoolEntryView:
    entry = pool.get_entry(game_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Surface not found")
    return pool.view(entry)


@router.get("/pool/{game_id}/loaded", response_model=LoadedResponse)
async def is_loaded_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> LoadedResponse:
    return LoadedResponse(game_id=game_id, loaded=pool.is_loaded(game_id))


@router.post("/pool/{game_id}/inject", status_code=status.HTTP_202_ACCEPTED)
async def inject_route(
    game_id: str,
    payload: InjectRequest,
    pool: SurfacePoolManager = Depends(get_surface_pool),
) -> dict[str, object]:
    # Fire-and-forget: accepted even when the surface is not resident.
    pool.inject_script(game_id, payload.script)
    return {"game_id": game_id, "resident": game_id in pool}


@router.post("/pool/{game_id}/start", status_code=status.HTTP_202_ACCEPTED)
async def start_game_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> dict[str, object]:
    pool.start_game(game_id)
    return {"game_id": game_id, "resident": game_id in pool}


@router.post("/pool/{game_id}/reload", status_code=status.HTTP_202_ACCEPTED)
async def reload_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> dict[str, object]:
    try:
        pool.reload(game_id)
    except SurfaceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"game_id": game_id, "resident": True}


@router.post("/pool/{game_id}/loaded", status_code=status.HTTP_202_ACCEPTED)
async def surface_loaded_route(game_id: str, pool: SurfacePoolManager = Depends(get_surface_pool)) -> dict[str, object]:
    """Ingress for surfaces hosted outside this process to report a finished load."""

    pool.on_surface_loaded(game_id)
    return {"game_id": game_id, "loaded": pool.is_loaded(game_id)}


@router.post("/pool/{game_id}/messages", status_code=status.HTTP_202_ACCEPTED)
async def surface_message_route(
    game_id: str,
    payload: SurfaceMessageRequest,
    pool: SurfacePoolManager = Depends(get_surface_pool),
) -> dict[str, str]:
    """Ingress for surfaces hosted outside this process to post a message.

    Always accepted: malformed or stale messages are dropped silently.
    """

    pool.on_surface_message(game_id, payload.payload)
    return {"game_id": game_id}


# -- feed ---------------------------------------------------------------------


@router.post("/feed/generate", response_model=FeedResponse)
async def generate_feed_route(payload: FeedGenerateRequest, settings: PoolSettings = Depends(get_settings)) -> FeedResponse:
    items = generate_feed(
        payload.games,
        count=payload.count,
        start_index=payload.start_index,
        games_host=settings.games_host,
    )
    return FeedResponse(items=items)


@router.post("/feed/window", response_model=PoolSnapshot)
async def feed_window_route(
    payload: FeedWindowRequest,
    pool: SurfacePoolManager = Depends(get_surface_pool),
    settings: PoolSettings = Depends(get_settings),
) -> PoolSnapshot:
    if payload.active_index >= len(payload.items):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="active_index is past the end of the feed")
    lookahead = settings.lookahead if payload.lookahead is None else payload.lookahead
    sync_feed_window(pool, payload.items, payload.active_index, lookahead=lookahead)
    return pool.snapshot()


# -- scores -------------------------------------------------------------------


@router.get("/scores", response_model=BestScoresResponse)
async def best_scores_route(limit: int = 10, r: redis.Redis = Depends(get_redis)) -> BestScoresResponse:
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="limit must be 1..100")
    return BestScoresResponse(scores=list_best_scores(r=r, limit=limit))


@router.get("/scores/{game_id}", response_model=BestScore)
async def best_score_route(game_id: str, r: redis.Redis = Depends(get_redis)) -> BestScore:
    score = get_best_score(r=r, game_id=game_id)
    if score is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No score recorded")
    return BestScore(game_id=game_id, score=score)


@router.get("/surfaces/{game_id}/events")
async def surface_events_route(game_id: str, count: int = 20, r: redis.Redis = Depends(get_redis)) -> dict[str, object]:
    """Debug endpoint: read the relayed message stream for a surface."""

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")
    return {"game_id": game_id, "events": read_surface_events(r=r, game_id=game_id, count=count)}
