"""Assignment repository - Database reads for the reliability report"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ...models import OrderAssignment, Profile, UserRole

PHOTOGRAPHER_ROLE = "photographer"


class AssignmentRepository:
    """Repository for assignment database operations"""

    @staticmethod
    def get_photographers(db: Session) -> List[Profile]:
        return (
            db.query(Profile)
            .join(UserRole, UserRole.user_id == Profile.id)
            .filter(UserRole.role == PHOTOGRAPHER_ROLE)
            .order_by(Profile.id)
            .all()
        )

    @staticmethod
    def get_outcome_rows(
        db: Session, photographer_ids: List[str]
    ) -> Dict[str, List[Tuple[str, Optional[str]]]]:
        """(status, photographer_notes) of every assignment, grouped by photographer"""
        grouped: Dict[str, List[Tuple[str, Optional[str]]]] = defaultdict(list)
        if not photographer_ids:
            return grouped

        rows = (
            db.query(
                OrderAssignment.photographer_id,
                OrderAssignment.status,
                OrderAssignment.photographer_notes,
            )
            .filter(OrderAssignment.photographer_id.in_(photographer_ids))
            .all()
        )
        for photographer_id, status, notes in rows:
            grouped[photographer_id].append((status, notes))
        return grouped
