from src.api.routes.admin import router as admin_router
from src.api.routes.clients import router as clients_router
from src.api.routes.follow_ups import router as follow_ups_router
from src.api.routes.plans import router as plans_router
from src.api.routes.tattoo_history import router as tattoo_history_router

__all__ = [
    "admin_router",
    "clients_router",
    "follow_ups_router",
    "plans_router",
    "tattoo_history_router",
]
