"""Assignment router - admin reliability endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Profile
from .reliability import reliability_badge_variant, reliability_label
from .schemas import ReliabilityMetricsResponse
from .service import ReliabilityService

router = APIRouter(prefix="/admin/providers", tags=["Admin"])


def get_reliability_service(db: Session = Depends(get_db)) -> ReliabilityService:
    return ReliabilityService(db)


@router.get("/reliability", response_model=list[ReliabilityMetricsResponse])
async def get_reliability_report(
    refresh: bool = False,
    _: Profile = Depends(get_current_admin),
    service: ReliabilityService = Depends(get_reliability_service),
):
    """Per-photographer reliability, least reliable first"""
    return [
        ReliabilityMetricsResponse(
            providerId=m.provider_id,
            providerName=m.provider_name,
            providerEmail=m.provider_email,
            total=m.total,
            accepted=m.accepted,
            manuallyDeclined=m.manually_declined,
            autoDeclinedOnTimeout=m.auto_declined_on_timeout,
            completed=m.completed,
            acceptanceRate=m.acceptance_rate,
            timeoutRate=m.timeout_rate,
            completionRate=m.completion_rate,
            reliabilityScore=m.reliability_score,
            label=reliability_label(m.reliability_score),
            badgeVariant=reliability_badge_variant(m.reliability_score),
        )
        for m in service.get_report(use_cache=not refresh)
    ]
