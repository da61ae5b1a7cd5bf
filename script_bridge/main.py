"""
Script Bridge Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import config, scripts
from .services.config_manager import ConfigManager
from .services.script_editor import ScriptEditor
from .services.script_store import HiseScriptStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    logger.info("[Backend] Starting Script Bridge Backend...")
    config_manager = ConfigManager.get_instance()
    config = config_manager.get_config()

    # One editor (and so one script cache) per running app
    store = HiseScriptStore.from_config(config)
    app.state.script_editor = ScriptEditor(store, config_manager.get_editing_settings())
    logger.info("[Backend] ScriptEditor initialized for %s", store.base_url)

    if not await store.is_available():
        logger.warning("[Backend] HISE is not reachable at %s yet", store.base_url)

    yield
    logger.info("[Backend] Shutting down Script Bridge Backend...")


app = FastAPI(
    title="Script Bridge Backend",
    description="Incremental script editing bridge between language models and a HISE runtime",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for local agent clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(scripts.router, prefix="/api/scripts", tags=["scripts"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "script-bridge-backend"}


def run():
    """Console entry point"""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    server = ConfigManager.get_instance().get_config().get("server", {})
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=int(server.get("port", 8000)))


if __name__ == "__main__":
    run()
