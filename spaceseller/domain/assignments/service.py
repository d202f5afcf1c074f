"""Assignment service - Reliability report for admins"""

import logging
from dataclasses import asdict
from typing import List

from sqlalchemy.orm import Session

from ... import config
from ...cache import cache
from .reliability import ReliabilityMetrics, build_metrics, classify_assignments
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)

REPORT_CACHE_KEY = "reliability:report"


class ReliabilityService:
    def __init__(self, db: Session):
        self.db = db

    def get_report(self, use_cache: bool = True) -> List[ReliabilityMetrics]:
        """Metrics for every photographer, least reliable first"""
        if use_cache:
            cached = cache.get(REPORT_CACHE_KEY)
            if cached is not None:
                return [ReliabilityMetrics(**row) for row in cached]

        photographers = AssignmentRepository.get_photographers(self.db)
        outcome_rows = AssignmentRepository.get_outcome_rows(self.db, [p.id for p in photographers])

        report = []
        for photographer in photographers:
            name = f"{photographer.first_name or ''} {photographer.last_name or ''}".strip() or "N/A"
            outcomes = classify_assignments(outcome_rows.get(photographer.id, []))
            report.append(build_metrics(photographer.id, outcomes, name, photographer.email))

        report.sort(key=lambda m: m.reliability_score)
        logger.info(f"📊 Reliability report built for {len(report)} photographer(s)")

        cache.set(REPORT_CACHE_KEY, [asdict(m) for m in report], config.RELIABILITY_CACHE_TTL)
        return report
