import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from adapters.entry.http.chart_router import router as chart_router
from adapters.entry.http.live_router import router as live_router
from config.settings import settings
from workers.chart_supervisor import ChartSupervisor


def _setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


supervisor = ChartSupervisor()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _setup_logging()
    logging.getLogger(__name__).info("Starting api-dex-chart (lifespan startup)...")

    await supervisor.start()
    app.state.supervisor = supervisor

    try:
        yield
    finally:
        logging.getLogger(__name__).info("Shutting down api-dex-chart (lifespan shutdown)...")
        await supervisor.stop()


app = FastAPI(title="api-dex-chart", version="0.1.0", lifespan=lifespan)
app.include_router(chart_router)
app.include_router(live_router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
