import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.platform.ai_clients import ProviderPool
from app.platform.config import settings
from app.platform.db.session import Database
from app.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Pools live for the whole process and are shared by every request
    database = Database()
    await database.create_tables()
    providers = ProviderPool.from_settings()

    app.state.database = database
    app.state.providers = providers
    try:
        yield
    finally:
        providers.close()
        await database.dispose()


app = FastAPI(
    title="AccessSight API",
    description="Accessibility scanning, scoring and fix suggestions",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "AccessSight API",
        "description": "Scans web pages for accessibility issues and suggests fixes.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
