"""Mini-app manifest served at /.well-known/farcaster.json."""

from fastapi import APIRouter, Depends

from mintview.api.dependencies import get_settings
from mintview.core.config import Settings

router = APIRouter(tags=["manifest"])


def build_manifest(settings: Settings) -> dict:
    """Build the Farcaster frame manifest from settings."""
    app_url = settings.app_url.rstrip("/")
    return {
        "accountAssociation": {
            "header": settings.farcaster_association_header,
            "payload": settings.farcaster_association_payload,
            "signature": settings.farcaster_association_signature,
        },
        "frame": {
            "version": "1",
            "name": settings.project_title,
            "iconUrl": f"{app_url}/icon.png",
            "homeUrl": app_url,
            "imageUrl": f"{app_url}/og.png",
            "buttonTitle": "Open",
            "webhookUrl": f"{app_url}/api/webhook",
            "splashImageUrl": f"{app_url}/splash.png",
            "splashBackgroundColor": "#555555",
        },
    }


@router.get("/.well-known/farcaster.json")
async def farcaster_manifest(settings: Settings = Depends(get_settings)) -> dict:
    return build_manifest(settings)
