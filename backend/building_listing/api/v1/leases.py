"""임대차 항목 삭제 엔드포인트 (추가는 건물 하위 경로에서 처리)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from building_listing.api.deps import get_db
from building_listing.services import building_service

logger = logging.getLogger("building_listing.leases")

router = APIRouter()


@router.delete("/{lease_id}")
async def delete_lease(lease_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    """임대차 항목을 삭제합니다."""
    lease = await building_service.get_lease(db, lease_id)
    if not lease:
        raise HTTPException(status_code=404, detail="임대차 정보를 찾을 수 없습니다.")
    await building_service.delete_lease(db, lease)
    logger.debug("deleted lease: %s", lease_id)
    return {"detail": "삭제되었습니다."}
