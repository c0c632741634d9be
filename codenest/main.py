"""
CodeNest Judge - Main Application
Submission evaluation and streak/XP services
"""

from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from codenest import config
from codenest.judge.client import Judge0Client
from codenest.judge.database import create_submission_indexes
from codenest.judge.evaluator import SubmissionEvaluator
from codenest.judge.rate_limit import RequestBudget
from codenest.judge.router import router as judge_router
from codenest.logger import get_logger, setup_logging
from codenest.streaks.router import router as streak_router
from codenest.streaks.store import InMemoryStreakStore, MongoStreakStore, StreakStore

logger = get_logger(__name__)


def create_app(
    db: Optional[AsyncIOMotorDatabase] = None,
    evaluator: Optional[SubmissionEvaluator] = None,
    streak_store: Optional[StreakStore] = None,
    request_budget: Optional[RequestBudget] = None,
) -> FastAPI:
    """
    Build the application. Collaborators that are not passed in are created
    at startup and closed at shutdown, so importing this module opens nothing.
    """
    app = FastAPI(title="CodeNest Judge")

    app.state.db = db
    app.state.evaluator = evaluator
    app.state.streak_store = streak_store
    app.state.request_budget = request_budget or RequestBudget()

    owned = {}

    @app.on_event("startup")
    async def startup_event():
        if app.state.db is None:
            owned["mongo"] = AsyncIOMotorClient(config.MONGO_URL)
            app.state.db = owned["mongo"][config.MONGO_DB_NAME]
        if app.state.evaluator is None:
            owned["http"] = httpx.AsyncClient()
            app.state.evaluator = SubmissionEvaluator(Judge0Client(owned["http"]))
        if app.state.streak_store is None:
            if config.STREAK_STORE == "memory":
                app.state.streak_store = InMemoryStreakStore()
            else:
                app.state.streak_store = MongoStreakStore(app.state.db)

        try:
            await create_submission_indexes(app.state.db)
            if isinstance(app.state.streak_store, MongoStreakStore):
                await app.state.streak_store.create_indexes()
            logger.info("Indexes created")
        except PyMongoError as e:
            logger.error("Index creation failed: %s", e)

    @app.on_event("shutdown")
    async def shutdown_event():
        if "http" in owned:
            await owned.pop("http").aclose()
        if "mongo" in owned:
            owned.pop("mongo").close()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== ROUTER REGISTRATION ====================
    app.include_router(judge_router, prefix="/api")
    app.include_router(streak_router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "UP", "timestamp": datetime.now(timezone.utc)}

    return app


setup_logging(config.LOG_LEVEL)
app = create_app()
