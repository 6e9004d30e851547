from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.middleware import tenant_context_middleware
from src.api.routes.admin import router as admin_router
from src.api.routes.clients import router as clients_router
from src.api.routes.follow_ups import router as follow_ups_router
from src.api.routes.plans import router as plans_router
from src.api.routes.tattoo_history import router as tattoo_history_router
from src.core.config import settings
from src.core.errors import register_exception_handlers
from src.core.logging_config import configure_logging


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    yield


app = FastAPI(title="InkDesk Salon API", lifespan=lifespan)
app.middleware("http")(tenant_context_middleware)
register_exception_handlers(app)
app.include_router(plans_router, prefix="/api/v1")
app.include_router(clients_router, prefix="/api/v1")
app.include_router(tattoo_history_router, prefix="/api/v1")
app.include_router(follow_ups_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    return {"status": "ok"}
