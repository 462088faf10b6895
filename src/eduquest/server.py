import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from eduquest.application.srs.service import MasteryStore
from eduquest.consts import VERSION
from eduquest.domain.exceptions import EduquestError
from eduquest.domain.srs.models import CardMastery

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("eduquest.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"EduQuest SRS Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("EduQuest SRS Server shutting down...")


app = FastAPI(
    title="EduQuest SRS Server",
    description="Flashcard mastery tracking for the EduQuest web client.",
    version=VERSION,
    lifespan=lifespan,
)

_store: MasteryStore | None = None


def get_store() -> MasteryStore:
    """Process-wide store, built from the resolved configuration on first use."""
    global _store
    if _store is None:
        from eduquest.application.config import resolve_config
        from eduquest.application.factory import get_mastery_store

        _store = get_mastery_store(resolve_config())
    return _store


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class MasteryResponse(BaseModel):
    id: str
    level: int
    nextReview: int
    lastInterval: int

    @classmethod
    def from_domain(cls, mastery: CardMastery) -> "MasteryResponse":
        return cls(
            id=mastery.id,
            level=mastery.level,
            nextReview=mastery.next_review,
            lastInterval=mastery.last_interval,
        )


class ReviewRequest(BaseModel):
    front: str
    mastered: bool


start_time = time.time()


def _server_error(e: EduquestError) -> HTTPException:
    logger.error(f"Mastery store failed: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/mastery", response_model=dict[str, MasteryResponse])
def get_all_mastery(store: MasteryStore = Depends(get_store)):
    try:
        table = store.get_all_mastery()
    except EduquestError as e:
        raise _server_error(e) from e
    return {key: MasteryResponse.from_domain(m) for key, m in table.items()}


@app.get("/mastery/card", response_model=MasteryResponse)
def get_card_mastery(front: str, store: MasteryStore = Depends(get_store)):
    """
    Mastery for one card. Unknown cards get a level-0 record that is not stored.
    """
    try:
        return MasteryResponse.from_domain(store.get_card_mastery(front))
    except EduquestError as e:
        raise _server_error(e) from e


@app.get("/mastery/due", response_model=list[MasteryResponse])
def get_due_cards(store: MasteryStore = Depends(get_store)):
    try:
        return [MasteryResponse.from_domain(m) for m in store.due_cards()]
    except EduquestError as e:
        raise _server_error(e) from e


@app.post("/mastery/review", response_model=MasteryResponse)
def record_review(req: ReviewRequest, store: MasteryStore = Depends(get_store)):
    """
    Record a review outcome and return the updated record.
    """
    try:
        return MasteryResponse.from_domain(store.record_review(req.front, req.mastered))
    except EduquestError as e:
        raise _server_error(e) from e


@app.delete("/mastery")
def clear_mastery(store: MasteryStore = Depends(get_store)):
    store.clear()
    return {"cleared": True}
