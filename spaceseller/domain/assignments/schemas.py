"""Assignment domain schemas"""

from typing import Optional

from pydantic import BaseModel


class ReliabilityMetricsResponse(BaseModel):
    providerId: str
    providerName: str
    providerEmail: Optional[str]
    total: int
    accepted: int
    manuallyDeclined: int
    autoDeclinedOnTimeout: int
    completed: int
    acceptanceRate: float
    timeoutRate: float
    completionRate: float
    reliabilityScore: float
    label: str
    badgeVariant: str
