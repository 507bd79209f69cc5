"""건물 등록/수정 요청 스키마 (폼 입력 또는 PDF 추출 결과 기반)"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class BuildingInput:
    name: str
    address: str
    road_frontage: str | None = None


@dataclass(frozen=True)
class LandInfoInput:
    area_sqm: float = 0.0
    area_pyeong: float = 0.0
    zoning: str = ""
    assessed_price_per_pyeong: int = 0
    assessed_price_total: int = 0
    land_category: str | None = None


@dataclass(frozen=True)
class BuildingInfoInput:
    total_area_sqm: float = 0.0
    total_area_pyeong: float = 0.0
    footprint_area_sqm: float = 0.0
    footprint_area_pyeong: float = 0.0
    coverage_ratio: float = 0.0
    floor_area_ratio: float = 0.0
    floors: str = ""
    basement_floors: int = 0
    above_ground_floors: int = 0
    parking_spaces: int = 0
    completion_date: date | None = None
    has_elevator: bool = False
    structure: str | None = None
    primary_use: str | None = None


@dataclass(frozen=True)
class PriceInfoInput:
    sale_price: int = 0
    deposit: int = 0
    monthly_rent: int = 0
    yield_rate: float = 0.0
    price_per_pyeong: int = 0
    ai_estimate: int | None = None
    ai_estimate_per_pyeong: int | None = None


@dataclass(frozen=True)
class LeaseInput:
    floor: str
    tenant: str
    area_sqm: float = 0.0
    area_pyeong: float = 0.0
    deposit: int = 0
    monthly_rent: int = 0
    management_fee: int | None = None
    notes: str | None = None


@dataclass(frozen=True)
class BuildingCreate:
    building: BuildingInput
    land_info: LandInfoInput = field(default_factory=LandInfoInput)
    building_info: BuildingInfoInput = field(default_factory=BuildingInfoInput)
    price_info: PriceInfoInput = field(default_factory=PriceInfoInput)
    leases: list[LeaseInput] = field(default_factory=list)
    # 점수 키 → 1~10 (null 허용) + analysis_notes. 알 수 없는 키는 무시된다.
    analysis_score: dict[str, Any] | None = None


@dataclass(frozen=True)
class BuildingUpdate:
    building: BuildingInput | None = None
    land_info: LandInfoInput | None = None
    building_info: BuildingInfoInput | None = None
    price_info: PriceInfoInput | None = None
