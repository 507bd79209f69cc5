"""건물 매물 CRUD, 분석 점수, 임대차 추가 엔드포인트."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from building_listing.api.deps import get_db
from building_listing.models.building import Building
from building_listing.schemas.building import BuildingCreate, BuildingUpdate, LeaseInput
from building_listing.services import building_service

logger = logging.getLogger("building_listing.buildings")

router = APIRouter()


async def _get_or_404(db: AsyncSession, building_id: int) -> Building:
    building = await building_service.get_building(db, building_id)
    if not building:
        raise HTTPException(status_code=404, detail="건물을 찾을 수 없습니다.")
    return building


@router.get("")
async def list_buildings(db: AsyncSession = Depends(get_db)) -> list[dict]:
    """등록된 건물 목록을 최신순으로 조회합니다."""
    buildings = await building_service.list_buildings(db)
    return [building_service.building_to_dict(b) for b in buildings]


@router.post("", status_code=201)
async def create_building(payload: BuildingCreate, db: AsyncSession = Depends(get_db)) -> dict:
    """건물을 등록합니다.

    PDF 파싱 결과나 폼 입력을 그대로 받습니다. analysis_score가 함께 오면
    점수 레코드를 만들고 종합 점수를 계산합니다.
    """
    building = await building_service.create_building(db, payload)
    return building_service.building_to_dict(building)


@router.get("/{building_id}")
async def get_building(building_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    """건물 상세(토지/건물/금액/임대차/분석 점수)를 조회합니다."""
    building = await _get_or_404(db, building_id)
    return building_service.building_to_dict(building)


@router.put("/{building_id}")
async def update_building(
    building_id: int,
    payload: BuildingUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """전달된 섹션만 수정합니다."""
    building = await _get_or_404(db, building_id)
    building = await building_service.update_building(db, building, payload)
    return building_service.building_to_dict(building)


@router.delete("/{building_id}")
async def delete_building(building_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    """건물과 하위 정보(임대차, 분석 점수 포함)를 모두 삭제합니다."""
    building = await _get_or_404(db, building_id)
    await building_service.delete_building(db, building)
    return {"detail": "삭제되었습니다."}


@router.put("/{building_id}/analysis-score")
async def update_analysis_score(
    building_id: int,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """분석 점수를 부분 갱신합니다.

    알 수 없는 키는 무시되고, null은 기존 값을 유지합니다.
    종합 점수는 요청 값과 관계없이 저장된 점수로 다시 계산됩니다.
    """
    building = await _get_or_404(db, building_id)
    building = await building_service.update_analysis_score(db, building, payload)
    return building_service.score_to_dict(building.analysis_score)


@router.post("/{building_id}/leases", status_code=201)
async def add_lease(
    building_id: int,
    payload: LeaseInput,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """임대차 항목을 추가합니다."""
    building = await _get_or_404(db, building_id)
    lease = await building_service.add_lease(db, building, payload)
    logger.debug("added lease %s to building %s", lease.id, building_id)
    return building_service.lease_to_dict(lease)
