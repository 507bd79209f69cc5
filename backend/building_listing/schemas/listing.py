"""PDF 매물 추출 결과 스키마 (등록 폼 채우기용, 저장되지 않음)"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class ExtractionMethod(str, Enum):
    PATTERN = "pattern"  # 텍스트 패턴 매칭
    LLM = "llm"  # 문서 이해 모델 폴백


@dataclass(frozen=True)
class AddressParts:
    """주소 구성 요소"""

    city: str | None = None  # 서울, 부산 등
    district: str | None = None  # 구/군/시
    neighborhood: str | None = None  # 동/읍/면
    lot_number: str | None = None  # 지번 (예: 452-15)


@dataclass(frozen=True)
class BuildingSummary:
    """건물 기본 정보"""

    name: str = ""
    address: str = ""
    road_frontage: str = ""  # 도로상황 (예: 25m*4m (코너))
    address_parts: AddressParts = field(default_factory=AddressParts)


@dataclass(frozen=True)
class LandInfo:
    """토지 정보"""

    area_sqm: float = 0.0
    area_pyeong: float = 0.0
    zoning: str = ""  # 용도지역
    assessed_price_per_pyeong: int = 0  # 공시지가 (평당)
    assessed_price_total: int = 0  # 공시지가 합계
    land_category: str = ""  # 지목


@dataclass(frozen=True)
class BuildingInfo:
    """건물 정보"""

    total_area_sqm: float = 0.0  # 연면적
    total_area_pyeong: float = 0.0
    footprint_area_sqm: float = 0.0  # 건축면적
    footprint_area_pyeong: float = 0.0
    coverage_ratio: float = 0.0  # 건폐율 (%)
    floor_area_ratio: float = 0.0  # 용적률 (%)
    floors: str = ""  # 규모 (예: B1/4F)
    basement_floors: int = 0
    above_ground_floors: int = 0
    parking_spaces: int = 0
    completion_date: date | None = None  # 준공일
    has_elevator: bool = False
    structure: str = ""  # 구조
    primary_use: str = ""  # 주용도


@dataclass(frozen=True)
class PriceInfo:
    """금액 정보 (모두 원 단위)"""

    sale_price: int = 0  # 매매가
    deposit: int = 0  # 보증금 합계
    monthly_rent: int = 0  # 월 임대료 합계
    yield_rate: float = 0.0  # 수익률 (%)
    price_per_pyeong: int = 0  # 평단가
    ai_estimate: int | None = None  # AI 추정가
    ai_estimate_per_pyeong: int | None = None


@dataclass(frozen=True)
class LeaseEntry:
    """임대차 현황 한 행"""

    floor: str
    tenant: str
    area_sqm: float = 0.0
    area_pyeong: float = 0.0
    deposit: int = 0
    monthly_rent: int = 0
    notes: str | None = None


@dataclass(frozen=True)
class ExtractedListing:
    """PDF 한 건에서 추출한 매물 정보"""

    building: BuildingSummary = field(default_factory=BuildingSummary)
    land_info: LandInfo = field(default_factory=LandInfo)
    building_info: BuildingInfo = field(default_factory=BuildingInfo)
    price_info: PriceInfo = field(default_factory=PriceInfo)
    leases: list[LeaseEntry] = field(default_factory=list)
    # 폴백 분석에서만 채워진다 (None = PDF로 판단 불가)
    analysis_score: dict[str, int | None] | None = None
    analysis_notes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    method: ExtractionMethod
    listing: ExtractedListing
