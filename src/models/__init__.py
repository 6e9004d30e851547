from src.models.appointment import Appointment
from src.models.base import Base, TenantScopedBase, TimestampedBase
from src.models.client import Client
from src.models.enums import AppointmentStatus, PlanStatus, PlanTier
from src.models.follow_up import FollowUpRequest, FollowUpSubmission
from src.models.plan_details import PlanDetails
from src.models.portfolio_image import PortfolioImage
from src.models.staff_member import StaffMember
from src.models.tattoo_history import TattooHistory
from src.models.tenant import Tenant

__all__ = [
    "Base",
    "TimestampedBase",
    "TenantScopedBase",
    "AppointmentStatus",
    "PlanStatus",
    "PlanTier",
    "Tenant",
    "PlanDetails",
    "Client",
    "StaffMember",
    "PortfolioImage",
    "Appointment",
    "FollowUpRequest",
    "FollowUpSubmission",
    "TattooHistory",
]
