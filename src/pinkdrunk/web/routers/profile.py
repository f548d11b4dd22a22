"""User profile and threshold routes."""

from fastapi import APIRouter, Request

from ...services.calibration import ThresholdService
from ...services.profiles import ProfileService
from ...validation import ProfilePayload

router = APIRouter(prefix="/users/{user_id}", tags=["profile"])


def get_profiles(request: Request) -> ProfileService:
    """Get the profile service from app state."""
    return request.app.state.profiles


def get_thresholds(request: Request) -> ThresholdService:
    """Get the threshold service from app state."""
    return request.app.state.thresholds


@router.get("/profile")
async def read_profile(request: Request, user_id: str):
    """Profile with derived body metrics and the threshold ladder."""
    profiles = get_profiles(request)
    profile = await profiles.get_required_profile(user_id)
    thresholds = await get_thresholds(request).list_thresholds(user_id)

    return {
        "profile": profile.to_dict(),
        "thresholds": [t.to_dict() for t in thresholds],
    }


@router.post("/profile")
async def save_profile(request: Request, user_id: str, payload: ProfilePayload):
    """Create or update a profile."""
    profile, thresholds = await get_profiles(request).save_profile(user_id, payload)

    return {
        "profile": profile.to_dict(),
        "thresholds": [t.to_dict() for t in thresholds],
    }


@router.get("/thresholds")
async def read_thresholds(request: Request, user_id: str):
    """Threshold ladder, seeded if needed."""
    profile = await get_profiles(request).get_required_profile(user_id)
    thresholds = await get_thresholds(request).ensure_thresholds(user_id, profile)
    return {"thresholds": [t.to_dict() for t in thresholds]}
