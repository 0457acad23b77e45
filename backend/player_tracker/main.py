from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .db.database import init_db
from .logger import logger
from .pinger import PingScheduler
from .routers import stats
from .samples import SampleStore
from .servers import ServerRegistry
from .stats import StatsService


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up and initializing the database...")
    await init_db()

    registry = ServerRegistry()
    store = SampleStore()
    scheduler = PingScheduler(registry, store)
    api_app.state.stats_service = StatsService(
        store, registry, tick_interval_ms=scheduler.interval_ms
    )

    await scheduler.start()
    logger.info("Startup complete.")
    yield

    await scheduler.stop()
    logger.info("Shutdown complete.")


api_app = FastAPI(root_path="/api")

api_app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_app.include_router(stats.router)

app = FastAPI(lifespan=lifespan, title="Player Tracker")
app.mount("/api", api_app)
