import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_manager.app.common.exceptions import register_exception_handlers
from event_manager.app.router import auth_router, event_router, participant_router, user_router
from event_manager.config.database import database_models, engine  # noqa: F401
from event_manager.config.database.redis import get_redis_cache
from event_manager.config.env import CORS_ORIGINS, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Event management API starting")
    yield
    # shared clients live for the whole process and are closed once here
    await get_redis_cache().aclose()
    await engine.dispose()
    logger.info("Event management API stopped")


main_router = APIRouter(prefix="/api/v1")

main_router.include_router(auth_router)
main_router.include_router(user_router)
main_router.include_router(event_router)
main_router.include_router(participant_router)


app = FastAPI(title="Event Management API", lifespan=lifespan)
app.include_router(main_router)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.get("/api/health", tags=["Health"])
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("event_manager.main:app", host="0.0.0.0", port=8000)
