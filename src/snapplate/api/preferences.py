"""Profile and AI settings endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from snapplate.domain.profile import AISettings, UserProfile

if TYPE_CHECKING:
    from snapplate.containers import AppContainer

router = APIRouter(prefix="/api", tags=["preferences"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/profile")
async def get_profile(request: Request) -> dict[str, object]:
    """Return the saved profile with its calorie targets."""
    profile = _container(request).preferences.get_profile()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _profile_payload(profile)


@router.put("/profile")
async def save_profile(profile: UserProfile, request: Request) -> dict[str, object]:
    """Save the profile."""
    _container(request).preferences.save_profile(profile)
    return _profile_payload(profile)


@router.get("/settings/ai")
async def get_ai_settings(request: Request) -> dict[str, object]:
    """Return saved AI settings."""
    return _container(request).preferences.get_ai_settings().model_dump(mode="json")


@router.put("/settings/ai")
async def save_ai_settings(
    settings: AISettings, request: Request
) -> dict[str, object]:
    """Save AI settings."""
    _container(request).preferences.save_ai_settings(settings)
    return settings.model_dump(mode="json")


def _profile_payload(profile: UserProfile) -> dict[str, object]:
    return {
        "profile": profile.model_dump(mode="json"),
        "bmr": profile.bmr(),
        "tdee": profile.tdee(),
        "daily_target": profile.daily_target(),
    }
