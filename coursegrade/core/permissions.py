from fastapi import Depends, HTTPException, status

from coursegrade.core.current_user import get_current_user
from coursegrade.models.profile import Profile


def require_admin(current_user: Profile = Depends(get_current_user)) -> Profile:
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return current_user
