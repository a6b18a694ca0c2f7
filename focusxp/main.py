import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from focusxp.config import settings
from focusxp.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    yield

    await engine.dispose()


app = FastAPI(
    title="FocusXP API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from focusxp.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from focusxp.routers.gamification import router as gamification_router  # noqa: E402
from focusxp.routers.sessions import router as sessions_router  # noqa: E402
from focusxp.routers.stats import router as stats_router  # noqa: E402
from focusxp.routers.tasks import router as tasks_router  # noqa: E402

app.include_router(tasks_router)
app.include_router(sessions_router)
app.include_router(gamification_router)
app.include_router(stats_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
