"""
Request identity.

Tokens are verified by the API gateway in front of this service, which
forwards the authenticated user id in the X-User-Id header.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .models import Profile, UserRole

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Profile:
    """Resolve the forwarded user id to a profile"""
    if not x_user_id:
        logger.error("❌ No user id forwarded")
        raise HTTPException(status_code=401, detail="Not authenticated")

    profile = db.query(Profile).filter(Profile.id == x_user_id).first()
    if not profile:
        logger.warning(f"⚠️ Unknown user id forwarded: {x_user_id}")
        raise HTTPException(status_code=401, detail="Unknown user")
    return profile


async def get_current_admin(
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Profile:
    is_admin = (
        db.query(UserRole)
        .filter(UserRole.user_id == user.id, UserRole.role == ADMIN_ROLE)
        .first()
    )
    if not is_admin:
        logger.warning(f"⚠️ User {user.email} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
