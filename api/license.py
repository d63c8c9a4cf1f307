from fastapi import APIRouter, HTTPException, Query, Depends
from typing import Optional
from models.license import LicenseStatus, TIER_PRICE_IDS
from managers.auth_manager import JWTPayload, requires_scope
from repository import license as license_repo
from api.dependencies import NAMESPACE

router = APIRouter(prefix=NAMESPACE)


@router.get("/license", response_model=LicenseStatus, tags=["license"])
async def get_license_status(
    tier: Optional[str] = Query(None, description="Only report this tier"),
    token_data: JWTPayload = Depends(requires_scope("license.read")),
):
    """License validity and which tiers it unlocks."""
    if tier is not None and tier not in TIER_PRICE_IDS:
        raise HTTPException(status_code=400, detail=f"Unknown tier: {tier}")
    try:
        license = license_repo.get_license()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))

    status = LicenseStatus.from_license(license)
    if tier is not None:
        status.tiers = {tier: status.tiers[tier]}
    return status
