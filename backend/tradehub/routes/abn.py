"""ABN lookup route.

A successful lookup only confirms the ABN is registered and active. The
verification decision itself is made by an admin.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from ..abr import AbrLookupError, lookup_abn
from ..auth import CurrentUser
from ..config import Settings, get_settings
from ..logging_config import get_logger
from ..rate_limit import limiter
from ..rules.verification import is_valid_abn_format, normalize_abn

logger = get_logger("tradehub.abn")

router = APIRouter(prefix="/abn", tags=["abn"])


class AbnVerifyRequest(BaseModel):
    abn: str | None = None


class AbnVerifyResponse(BaseModel):
    abn: str
    abn_status: str | None = None
    entity_name: str | None = None
    entity_type: str | None = None
    gst: str | None = None


@router.post("/verify", response_model=AbnVerifyResponse)
@limiter.limit("10/minute")
async def verify_abn(
    request: Request,
    body: AbnVerifyRequest,
    user: CurrentUser,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Look up an ABN on the Australian Business Register."""
    abn = normalize_abn(body.abn)
    logger.info(f"POST /abn/verify | user={user.id}")

    if not is_valid_abn_format(abn):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ABN must be 11 digits",
        )

    if not settings.abr_guid:
        logger.error("ABR lookup requested but ABR_GUID is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ABN lookup is not configured",
        )

    try:
        details = await lookup_abn(
            abn,
            guid=settings.abr_guid,
            base_url=settings.abr_base_url,
            timeout=settings.abr_timeout_seconds,
        )
    except AbrLookupError as e:
        logger.warning(f"ABR lookup failed | status={e.status_code}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    if not details.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=details.message or "ABN is not active",
        )

    return AbnVerifyResponse(**details.to_dict())
