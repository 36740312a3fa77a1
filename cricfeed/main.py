import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from cricfeed.config import settings
from cricfeed.errors import CricketDataError, to_api_error
from cricfeed.feed import fetcher

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App startup/shutdown lifecycle."""
    logger.info(f"Cricket feed starting up against {settings.cricbuzz_base_url}")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Cricket Feed",
    description="Live, upcoming and recent cricket matches scraped from Cricbuzz",
    lifespan=lifespan,
)


def _generated_at() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ok(data) -> dict:
    return {"ok": True, "generatedAt": _generated_at(), "data": data.model_dump(mode="json", by_alias=True)}


def _error(error: Exception) -> JSONResponse:
    api_error = to_api_error(error)
    return JSONResponse(
        status_code=api_error["status"],
        content={
            "ok": False,
            "generatedAt": _generated_at(),
            "error": {"code": api_error["code"], "message": api_error["message"]},
        },
    )


@app.get("/api/matches")
async def get_matches():
    """Live, upcoming and recent matches."""
    try:
        return _ok(await fetcher.fetch_matches_data())
    except CricketDataError as e:
        logger.error(f"Match list failed: {e}")
        return _error(e)
    except Exception as e:
        logger.exception(f"Unexpected error building match list: {e}")
        return _error(e)


@app.get("/api/matches/{match_id}")
async def get_match(match_id: str):
    """Scorecard, squads and live state for one match."""
    try:
        return _ok(await fetcher.fetch_match_detail(match_id))
    except CricketDataError as e:
        logger.error(f"Match {match_id} failed: {e}")
        return _error(e)
    except Exception as e:
        logger.exception(f"Unexpected error building match {match_id}: {e}")
        return _error(e)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cricfeed.main:app", host="0.0.0.0", port=8000, reload=True)
