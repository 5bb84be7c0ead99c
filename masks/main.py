import logging

from fastapi import FastAPI

from masks.api.routes import router
from masks.content.singleton import init_content_for_app

app = FastAPI(title="masks", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_content_for_app()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "masks", "version": "0.1.0"}
