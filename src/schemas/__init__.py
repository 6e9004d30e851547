from src.schemas.admin import SystemHealthResponse
from src.schemas.clients import (
    AppointmentCreateRequest,
    AppointmentResponse,
    ClientCreateRequest,
    ClientResponse,
)
from src.schemas.follow_ups import (
    FollowUpLinkResponse,
    FollowUpSendResponse,
    FollowUpSubmissionRequest,
    FollowUpSubmissionResponse,
    UnansweredCountResponse,
)
from src.schemas.plans import (
    FeatureCheckRequest,
    FeatureCheckResponse,
    LimitsResponse,
    PlanDetailsResponse,
    PlanEndDateRequest,
    PlanUpgradeRequest,
    UsageStatsResponse,
)
from src.schemas.tattoo_history import (
    TattooHistoryCreateRequest,
    TattooHistoryResponse,
    TattooHistoryUpdateRequest,
)

__all__ = [
    "SystemHealthResponse",
    "ClientCreateRequest",
    "ClientResponse",
    "AppointmentCreateRequest",
    "AppointmentResponse",
    "FollowUpLinkResponse",
    "FollowUpSubmissionRequest",
    "FollowUpSubmissionResponse",
    "FollowUpSendResponse",
    "UnansweredCountResponse",
    "PlanDetailsResponse",
    "UsageStatsResponse",
    "LimitsResponse",
    "FeatureCheckRequest",
    "FeatureCheckResponse",
    "PlanUpgradeRequest",
    "PlanEndDateRequest",
    "TattooHistoryCreateRequest",
    "TattooHistoryUpdateRequest",
    "TattooHistoryResponse",
]
