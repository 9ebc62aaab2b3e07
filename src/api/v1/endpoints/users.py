from fastapi import APIRouter, Depends
import structlog

from ...dependencies import get_current_user_required, get_user_repository
from ....core.exceptions import NotFoundError
from ....models.user import User
from ....news.schemas.responses import ApiResponse
from ....repositories.user_repository import UserRepository
from ....utils.validation_utils import normalize_preferences
from ..schemas import PreferencesData, UpdatePreferencesRequest, UserProfile, UserProfileData

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/profile", response_model=ApiResponse[UserProfileData])
async def get_profile(current_user: User = Depends(get_current_user_required)):
    return ApiResponse[UserProfileData](
        message="Profile retrieved successfully",
        data=UserProfileData(user=UserProfile.model_validate(current_user)),
    )


@router.get("/preferences", response_model=ApiResponse[PreferencesData])
async def get_preferences(current_user: User = Depends(get_current_user_required)):
    return ApiResponse[PreferencesData](
        message="Preferences retrieved successfully",
        data=PreferencesData(preferences=current_user.preferences),
    )


@router.put("/preferences", response_model=ApiResponse[PreferencesData])
async def update_preferences(
    request: UpdatePreferencesRequest,
    current_user: User = Depends(get_current_user_required),
    users: UserRepository = Depends(get_user_repository)
):
    preferences = normalize_preferences(request.preferences)

    updated_user = users.update_preferences(current_user.user_id, preferences)
    if not updated_user:
        raise NotFoundError("User not found")

    logger.info("preferences_updated", user_id=current_user.user_id, count=len(preferences))
    return ApiResponse[PreferencesData](
        message="Preferences updated successfully",
        data=PreferencesData(preferences=updated_user.preferences),
    )
