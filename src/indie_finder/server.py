"""
FastAPI server exposing the search core.

Endpoints return the full search envelope; embedding vectors are never
serialized.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from loguru import logger

from .service import get_orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        orchestrator = get_orchestrator()
    except ValueError as exc:
        # Missing credentials or corpus: keep serving so the error surfaces per request.
        logger.warning(f"[Server] Search service unavailable at startup: {exc}")
        yield
        return
    orchestrator.cache.start()
    yield
    await orchestrator.cache.close()


app = FastAPI(
    title="indie-finder",
    description="Natural-language search for indie games",
    lifespan=lifespan,
)


def _unavailable(exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=503)


@app.get("/api/search")
async def search(
    q: str = "",
    user_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=50),
):
    """Search games and return one page of the ranked results."""
    try:
        orchestrator = get_orchestrator()
    except ValueError as exc:
        return _unavailable(exc)

    response = await orchestrator.search_with_metadata(q, user_id)
    payload = response.to_public_dict()

    start = (page - 1) * page_size
    end = start + page_size
    total = len(payload["results"])
    payload["results"] = payload["results"][start:end]
    payload["page"] = page
    payload["page_size"] = page_size
    payload["total_count"] = total
    payload["has_more"] = end < total
    return payload


@app.get("/api/games")
async def list_games():
    """Unfiltered game listing."""
    try:
        orchestrator = get_orchestrator()
    except ValueError as exc:
        return _unavailable(exc)

    results = await orchestrator.get_all_games()
    games = []
    for result in results:
        game = result.game
        games.append(
            {
                "app_id": game.app_id,
                "title": game.title,
                "description": game.description,
                "price": game.price,
                "tags": game.tags,
                "images": game.images,
                "store_url": game.store_url,
                "similarity": result.similarity,
            }
        )
    return {"games": games, "count": len(games)}


@app.post("/api/cache/clear")
async def clear_cache():
    """Drop cached intents, corpus snapshots, and responses."""
    try:
        orchestrator = get_orchestrator()
    except ValueError as exc:
        return _unavailable(exc)

    orchestrator.clear_cache()
    return {"cleared": True}


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
