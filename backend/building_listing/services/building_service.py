"""건물 매물 저장/조회 서비스

라우터는 요청 검증과 HTTP 에러만 담당하고, DB 작업과 응답 직렬화는 여기서 처리한다.
분석 점수가 저장될 때마다 종합 점수는 저장된 25개 항목 전체로 다시 계산한다.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict
from datetime import date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from building_listing.agents.tools.number_parser import format_price
from building_listing.models.building import (
    AnalysisScore,
    Building,
    BuildingInfo,
    LandInfo,
    Lease,
    PriceInfo,
)
from building_listing.schemas.building import BuildingCreate, BuildingUpdate, LeaseInput
from building_listing.services.score_calculator import (
    RATING_KEYS,
    calculate_group_scores,
    calculate_total_score,
    extract_valid_scores,
    get_grade,
)

logger = logging.getLogger(__name__)

_HIDDEN_COLUMNS = {"building_id"}


# ---------------------------------------------------------------------------
# 조회
# ---------------------------------------------------------------------------


async def list_buildings(db: AsyncSession) -> list[Building]:
    result = await db.execute(select(Building).order_by(Building.created_at.desc(), Building.id.desc()))
    return list(result.scalars().all())


async def get_building(db: AsyncSession, building_id: int) -> Building | None:
    # 커밋 이후에도 관계가 최신 상태로 로드되도록 항상 다시 채운다
    result = await db.execute(
        select(Building).where(Building.id == building_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_lease(db: AsyncSession, lease_id: int) -> Lease | None:
    return await db.get(Lease, lease_id)


# ---------------------------------------------------------------------------
# 분석 점수
# ---------------------------------------------------------------------------


def _ratings(score: AnalysisScore) -> dict[str, int | None]:
    return {key: getattr(score, key) for key in RATING_KEYS}


def _apply_scores(score: AnalysisScore, payload: Mapping[str, Any]) -> AnalysisScore:
    """알려진 점수 키만 반영하고 종합 점수를 다시 계산한다.

    null 값은 "변경 없음"으로 취급된다. analysis_notes가 dict로 오면 통째로 교체한다.
    """
    for key, value in extract_valid_scores(payload).items():
        setattr(score, key, value)

    notes = payload.get("analysis_notes")
    if isinstance(notes, dict):
        score.analysis_notes = {str(k): str(v) for k, v in notes.items() if v is not None}

    score.total_score = calculate_total_score(_ratings(score))
    return score


async def update_analysis_score(
    db: AsyncSession, building: Building, payload: Mapping[str, Any]
) -> Building:
    """분석 점수를 부분 갱신한다 (레코드가 없으면 새로 만든다)."""
    score = building.analysis_score
    if score is None:
        score = AnalysisScore()
        building.analysis_score = score

    _apply_scores(score, payload)
    await db.commit()

    logger.info("분석 점수 저장: building=%s total=%.2f", building.id, score.total_score)
    return await get_building(db, building.id)


# ---------------------------------------------------------------------------
# 생성 / 수정 / 삭제
# ---------------------------------------------------------------------------


async def create_building(db: AsyncSession, payload: BuildingCreate) -> Building:
    building = Building(**asdict(payload.building))
    building.land_info = LandInfo(**asdict(payload.land_info))
    building.building_info = BuildingInfo(**asdict(payload.building_info))
    building.price_info = PriceInfo(**asdict(payload.price_info))
    building.leases = [Lease(**asdict(lease)) for lease in payload.leases]

    # 점수가 함께 오지 않으면 점수 레코드를 만들지 않는다
    if payload.analysis_score is not None:
        building.analysis_score = _apply_scores(AnalysisScore(), payload.analysis_score)

    db.add(building)
    await db.commit()

    logger.info(
        "건물 등록: id=%s name=%s 매매가=%s 임대차=%d건",
        building.id,
        building.name,
        format_price(payload.price_info.sale_price),
        len(payload.leases),
    )
    return await get_building(db, building.id)


def _assign(target: Any, values: Mapping[str, Any]) -> None:
    for key, value in values.items():
        setattr(target, key, value)


async def update_building(db: AsyncSession, building: Building, payload: BuildingUpdate) -> Building:
    """전달된 섹션만 교체한다. 상세 레코드가 없으면 새로 만든다."""
    if payload.building is not None:
        _assign(building, asdict(payload.building))

    sections = (
        ("land_info", LandInfo, payload.land_info),
        ("building_info", BuildingInfo, payload.building_info),
        ("price_info", PriceInfo, payload.price_info),
    )
    for attr, model, section in sections:
        if section is None:
            continue
        current = getattr(building, attr)
        if current is None:
            setattr(building, attr, model(**asdict(section)))
        else:
            _assign(current, asdict(section))

    await db.commit()
    logger.info("건물 수정: id=%s", building.id)
    return await get_building(db, building.id)


async def delete_building(db: AsyncSession, building: Building) -> None:
    building_id = building.id
    await db.delete(building)
    await db.commit()
    logger.info("건물 삭제: id=%s", building_id)


async def add_lease(db: AsyncSession, building: Building, payload: LeaseInput) -> Lease:
    lease = Lease(building_id=building.id, **asdict(payload))
    db.add(lease)
    await db.commit()
    logger.debug("임대차 추가: building=%s floor=%s tenant=%s", building.id, lease.floor, lease.tenant)
    return lease


async def delete_lease(db: AsyncSession, lease: Lease) -> None:
    await db.delete(lease)
    await db.commit()


# ---------------------------------------------------------------------------
# 응답 직렬화
# ---------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _row_to_dict(row: Any) -> dict[str, Any] | None:
    if row is None:
        return None
    return {
        column.key: _jsonable(getattr(row, column.key))
        for column in row.__table__.columns
        if column.key not in _HIDDEN_COLUMNS
    }


def lease_to_dict(lease: Lease) -> dict[str, Any]:
    return _row_to_dict(lease)


def score_to_dict(score: AnalysisScore | None) -> dict[str, Any] | None:
    """점수 레코드 + 항목별 평균 + 등급."""
    if score is None:
        return None
    data = _row_to_dict(score)
    data["analysis_notes"] = score.analysis_notes or {}
    data["group_scores"] = calculate_group_scores(_ratings(score))
    data["grade"] = get_grade(score.total_score)
    return data


def building_to_dict(building: Building) -> dict[str, Any]:
    data = _row_to_dict(building)
    data["land_info"] = _row_to_dict(building.land_info)
    data["building_info"] = _row_to_dict(building.building_info)
    data["price_info"] = _row_to_dict(building.price_info)
    data["leases"] = [lease_to_dict(lease) for lease in building.leases]
    data["analysis_score"] = score_to_dict(building.analysis_score)
    if building.price_info is not None:
        data["sale_price_label"] = format_price(building.price_info.sale_price)
    return data
