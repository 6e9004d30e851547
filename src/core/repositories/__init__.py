from src.core.repositories.appointments import AppointmentRepository
from src.core.repositories.base import Repository, TenantContextMissingError, TenantRepository
from src.core.repositories.clients import ClientRepository
from src.core.repositories.follow_ups import FollowUpRequestRepository
from src.core.repositories.plan_details import PlanDetailsRepository
from src.core.repositories.tattoo_histories import TattooHistoryRepository
from src.core.repositories.tenants import TenantAccountRepository

__all__ = [
    "TenantContextMissingError",
    "Repository",
    "TenantRepository",
    "AppointmentRepository",
    "ClientRepository",
    "FollowUpRequestRepository",
    "PlanDetailsRepository",
    "TattooHistoryRepository",
    "TenantAccountRepository",
]
