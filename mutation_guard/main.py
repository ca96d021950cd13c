"""
Mutation Guard Backend - FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mutation_guard import __version__
from mutation_guard.routers import files, policy, tools
from mutation_guard.services.config_manager import ConfigManager
from mutation_guard.services.gateway import MutationGateway

logger = logging.getLogger(__name__)


def create_app(gateway: MutationGateway | None = None) -> FastAPI:
    """Build the application; without a gateway one is built from the saved config at startup"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - startup and shutdown logic"""
        config = ConfigManager.get_instance().get_config()
        logging.basicConfig(
            level=config.get("log_level", "INFO"),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        if gateway is None:
            app.state.gateway = MutationGateway.from_config(config)
        else:
            app.state.gateway = gateway
        logger.info("Mutation Guard started for %s", app.state.gateway.workspace.root)

        yield
        logger.info("Shutting down Mutation Guard")

    app = FastAPI(
        title="Mutation Guard",
        description="Policy-checked, snapshot-backed file mutations for coding agents",
        version=__version__,
        lifespan=lifespan,
    )

    # The agent and editor plugins call in from localhost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(files.router, prefix="/api", tags=["files"])
    app.include_router(policy.router, prefix="/api/policy", tags=["policy"])
    app.include_router(tools.router, prefix="/api/tools", tags=["tools"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "mutation-guard"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "127.0.0.1"), port=server.get("port", 8000))
