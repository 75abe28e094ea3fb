from fastapi import FastAPI
import logging

from playfeed.api.routes import router
from playfeed.startup import init_pool_for_app, shutdown_pool_for_app

app = FastAPI(title="playfeed", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_pool_for_app()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await shutdown_pool_for_app()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "playfeed", "version": "0.1.0"}
