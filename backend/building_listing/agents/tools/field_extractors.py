"""매물 PDF 텍스트 필드 추출기 - 필드별 정규식 규칙 테이블 + 공통 매칭 엔진

각 필드는 우선순위가 정해진 패턴 목록을 가진다. 앞의 패턴이 먼저 매칭되면
뒤의 패턴은 보지 않으며, 모든 패턴이 실패하면 필드 기본값을 돌려준다.
필드끼리 교차 검증은 하지 않는다.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from building_listing.agents.tools.number_parser import parse_korean_price, parse_number
from building_listing.schemas.listing import (
    AddressParts,
    BuildingInfo,
    BuildingSummary,
    ExtractedListing,
    LandInfo,
    LeaseEntry,
    PriceInfo,
)

logger = logging.getLogger(__name__)

# "55억", "70억 9,431만", "1,300만", "200000000"
PRICE_TOKEN = r"\d[\d,]*(?:\.\d+)?\s*억(?:\s*\d[\d,]*\s*만)?|\d[\d,]*\s*만|\d[\d,]*"


# ---------------------------------------------------------------------------
# 값 변환
# ---------------------------------------------------------------------------


def _text(value: str) -> str:
    return value.strip()


def _float(value: str) -> float:
    return parse_number(value)


def _int(value: str) -> int:
    return int(parse_number(value))


def parse_date(value: str) -> date | None:
    """"1993-08-02", "1993.8", "1993년 8월" 형식을 date로 변환한다. 빠진 월/일은 1로 채운다."""
    parts = [int(p) for p in re.findall(r"\d+", value)]
    if not parts:
        return None
    year = parts[0]
    month = parts[1] if len(parts) > 1 else 1
    day = parts[2] if len(parts) > 2 else 1
    try:
        return date(year, month, day)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# 규칙 테이블
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    """한 필드의 추출 규칙: (패턴, 캡처 그룹) 목록을 순서대로 시도한다."""

    name: str
    patterns: tuple[tuple[re.Pattern[str], int], ...]
    coerce: Callable[[str], Any] = _text
    default: Any = ""


def _rule(
    name: str,
    *patterns: str | tuple[str, int],
    coerce: Callable[[str], Any] = _text,
    default: Any = "",
    flags: int = 0,
) -> FieldRule:
    compiled = []
    for pattern in patterns:
        regex, group = pattern if isinstance(pattern, tuple) else (pattern, 1)
        compiled.append((re.compile(regex, flags), group))
    return FieldRule(name=name, patterns=tuple(compiled), coerce=coerce, default=default)


FIELD_RULES: tuple[FieldRule, ...] = (
    # 기본 정보
    _rule(
        "name",
        r"([가-힣]+동\s+[가-힣a-zA-Z]+(?:\s*\([^)]+\))?)",
        r"빌딩PT\s+프레젠테이션\s*([가-힣a-zA-Z\s()]+)",
    ),
    _rule(
        "address",
        (r"서울시?\s*[가-힣]+구\s*[가-힣]+동\s*[\d-]+", 0),
        (
            r"(?:서울|부산|대구|인천|광주|대전|울산|세종|경기|강원|충북|충남|전북|전남|경북|경남|제주)[가-힣]*"
            r"\s+[가-힣]+[시군구](?:\s+[가-힣]+구)?\s+[가-힣\d]+[동읍면리가]\s*[\d-]+",
            0,
        ),
    ),
    _rule(
        "road_frontage",
        r"도로상황\s*(\d+(?:\.\d+)?m\s*\*\s*\d+(?:\.\d+)?m[^가-힣(\n]*(?:\([^)]+\))?)",
        r"(\d+(?:\.\d+)?m\s*\*\s*\d+(?:\.\d+)?m\s*(?:\([^)]+\))?)",
        flags=re.IGNORECASE,
    ),
    # 토지 정보
    _rule(
        "land_area_sqm",
        r"(?:토지|대지)면적\s*([\d,.]+)\s*㎡",
        r"면적\s*([\d,.]+)\s*㎡",
        r"토지[\s\S]*?면적[\s\S]*?([\d,.]+)\s*㎡",
        coerce=_float,
        default=0.0,
    ),
    _rule(
        "land_area_pyeong",
        r"(?:토지|대지)면적\s*[\d,.]+\s*㎡\s*\(?\s*([\d,.]+)\s*평",
        (r"([\d,.]+)\s*㎡\s*\(?\s*([\d,.]+)\s*평", 2),
        r"면적[\s\S]*?([\d,.]+)\s*평",
        coerce=_float,
        default=0.0,
    ),
    _rule("land_category", r"지목\s*([가-힣]+)"),
    _rule("zoning", r"용도지역\s*([가-힣\d]+지역)"),
    _rule(
        "assessed_price_per_pyeong",
        r"공시지가\s*\(평\)\s*([\d,]+)\s*원",
        r"공시지가[^합]*?([\d,]+)\s*원",
        coerce=_int,
        default=0,
    ),
    _rule(
        "assessed_price_total",
        r"공시지가\s*합계\s*([\d,]+)\s*원",
        r"합계\s*([\d,]+)\s*원",
        coerce=_int,
        default=0,
    ),
    # 건물 정보
    _rule("total_area_sqm", r"연면적\s*([\d,.]+)\s*㎡", coerce=_float, default=0.0),
    _rule(
        "total_area_pyeong",
        r"연면적\s*[\d,.]+\s*㎡\s*\(?\s*([\d,.]+)\s*평",
        r"연면적[\s\S]*?[\d,.]+\s*㎡[\s\S]*?([\d,.]+)\s*평",
        coerce=_float,
        default=0.0,
    ),
    _rule("footprint_area_sqm", r"건축면적\s*([\d,.]+)\s*㎡", coerce=_float, default=0.0),
    _rule(
        "footprint_area_pyeong",
        r"건축면적\s*[\d,.]+\s*㎡\s*\(?\s*([\d,.]+)\s*평",
        r"건축면적[\s\S]*?[\d,.]+\s*㎡[\s\S]*?([\d,.]+)\s*평",
        coerce=_float,
        default=0.0,
    ),
    _rule("coverage_ratio", r"건폐율\s*([\d.]+)\s*%", coerce=_float, default=0.0),
    _rule("floor_area_ratio", r"용적률\s*([\d.]+)\s*%", coerce=_float, default=0.0),
    _rule(
        "floors",
        r"규모\s*(B?\d+/?\d*F?)",
        r"규모\s*(지하\s*\d+층\s*/?\s*지상\s*\d+층|지상\s*\d+층)",
        flags=re.IGNORECASE,
    ),
    _rule(
        "parking_spaces",
        r"주차대수\s*(?:총\s*)?(\d+)\s*대",
        r"총\s*(\d+)\s*대",
        coerce=_int,
        default=0,
    ),
    _rule(
        "completion_date",
        r"(?:준공년도|준공일|사용승인일)\s*(\d{4}(?:[-./]\d{1,2}){0,2})",
        coerce=parse_date,
        default=None,
    ),
    _rule("structure", r"구조\s*([가-힣]+조(?:\s*,\s*[가-힣]+조)*)"),
    _rule("primary_use", r"주용도\s*([가-힣]+(?:\s*및\s*[가-힣]+)?)"),
    # 금액 정보
    _rule("sale_price", rf"매매가격?\s*({PRICE_TOKEN})", coerce=parse_korean_price, default=0),
    _rule("deposit", rf"보증금\s*(?:합계\s*)?({PRICE_TOKEN})", coerce=parse_korean_price, default=0),
    _rule(
        "monthly_rent",
        r"임대료\s*([\d,]+\s*만)",
        r"월세\s*([\d,]+\s*만)",
        coerce=parse_korean_price,
        default=0,
    ),
    _rule("yield_rate", r"수익률\s*([\d.]+)\s*%", coerce=_float, default=0.0),
    _rule(
        "price_per_pyeong",
        r"평단가\s*([\d,]+\s*만)",
        r"평단가\s*([\d,]+)\s*원",
        coerce=parse_korean_price,
        default=0,
    ),
    _rule(
        "ai_estimate",
        rf"AI\s*추정가?\s*({PRICE_TOKEN})",
        rf"AI\s*시세[\s\S]*?({PRICE_TOKEN})",
        coerce=parse_korean_price,
        default=None,
        flags=re.IGNORECASE,
    ),
    _rule(
        "ai_estimate_per_pyeong",
        r"AI\s*(?:추정\s*)?평단가\s*([\d,]+)\s*원",
        coerce=_int,
        default=None,
        flags=re.IGNORECASE,
    ),
)

RULES_BY_NAME: dict[str, FieldRule] = {rule.name: rule for rule in FIELD_RULES}


# ---------------------------------------------------------------------------
# 매칭 엔진
# ---------------------------------------------------------------------------


def extract_field(text: str, rule: FieldRule) -> Any:
    """규칙의 패턴을 순서대로 시도하고 첫 매칭 값을 변환해 반환한다."""
    for pattern, group in rule.patterns:
        match = pattern.search(text)
        if match is None:
            continue
        return rule.coerce(match.group(group))
    return rule.default


def extract_fields(text: str) -> dict[str, Any]:
    """규칙 테이블 전체를 적용해 필드명 → 값 dict를 만든다."""
    return {rule.name: extract_field(text, rule) for rule in FIELD_RULES}


# ---------------------------------------------------------------------------
# 특수 필드
# ---------------------------------------------------------------------------

_BASEMENT_PATTERNS = (re.compile(r"B(\d+)", re.IGNORECASE), re.compile(r"지하\s*(\d+)"))
_ABOVE_PATTERNS = (re.compile(r"(?<![B\d])(\d+)F", re.IGNORECASE), re.compile(r"지상\s*(\d+)"))


def _first_int(patterns: tuple[re.Pattern[str], ...], text: str) -> int:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return 0


def parse_floors(floors: str) -> tuple[int, int]:
    """규모 표기("B1/4F", "지하1층/지상4층")를 (지하층수, 지상층수)로 분리한다."""
    return _first_int(_BASEMENT_PATTERNS, floors), _first_int(_ABOVE_PATTERNS, floors)


_ELEVATOR_RE = re.compile(r"승강기\s*(\S+)")


def extract_elevator(text: str) -> bool:
    """승강기 다음 토큰에 "없" 또는 "-"가 없으면 있는 것으로 본다."""
    match = _ELEVATOR_RE.search(text)
    if match is None:
        return False
    token = match.group(1)
    return "-" not in token and "없" not in token


_ADDRESS_PARTS_RE = re.compile(
    r"(?P<city>[가-힣]+)\s+"
    r"(?P<district>(?:[가-힣]+시\s+)?[가-힣]+[구군시])\s+"
    r"(?P<neighborhood>[가-힣\d]+[동읍면리가])"
    r"(?:\s*(?P<lot>산?\d+(?:-\d+)?))?"
)


def parse_address(address: str) -> AddressParts:
    """"서울 강동구 암사동 452-15" 형식 주소를 구성 요소로 나눈다."""
    match = _ADDRESS_PARTS_RE.search(address)
    if match is None:
        return AddressParts()
    return AddressParts(
        city=match.group("city"),
        district=match.group("district"),
        neighborhood=match.group("neighborhood"),
        lot_number=match.group("lot"),
    )


# 층, 임차인, 면적(㎡), 면적(평), 보증금, 월세, 비고 순서의 한 행.
# ㎡/평 단위가 빠지는 등 순서가 어긋난 행은 통째로 건너뛴다.
_LEASE_AMOUNT = r"\d[\d,]*(?:억(?:\s*\d[\d,]*만)?|만)?"
_LEASE_RE = re.compile(
    r"(지하\d+층|\d+층)\s+"
    r"([가-힣a-zA-Z\s()&·]+?)\s+"
    r"([\d.]+)㎡\s+"
    r"([\d.]+)평\s+"
    rf"({_LEASE_AMOUNT})\s+"
    rf"({_LEASE_AMOUNT})"
    r"[ \t]*((?!지하\d)[가-힣]*)"
)


def extract_leases(text: str) -> list[LeaseEntry]:
    """임대차 현황 행을 문서 순서대로 모두 추출한다."""
    leases = []
    for match in _LEASE_RE.finditer(text):
        floor, tenant, area_sqm, area_pyeong, deposit, monthly_rent, notes = match.groups()
        leases.append(
            LeaseEntry(
                floor=floor.strip(),
                tenant=tenant.strip(),
                area_sqm=parse_number(area_sqm),
                area_pyeong=parse_number(area_pyeong),
                deposit=parse_korean_price(deposit),
                monthly_rent=parse_korean_price(monthly_rent),
                notes=notes.strip() or None,
            )
        )
    return leases


# ---------------------------------------------------------------------------
# 전체 조립
# ---------------------------------------------------------------------------


def extract_listing(text: str) -> ExtractedListing:
    """텍스트 패턴 매칭으로 매물 정보를 조립한다. 분석 점수는 만들지 않는다."""
    fields = extract_fields(text)
    basement, above = parse_floors(fields["floors"])
    leases = extract_leases(text)

    matched = sum(1 for rule in FIELD_RULES if fields[rule.name] != rule.default)
    logger.debug("패턴 추출: %d/%d 필드 매칭, 임대차 %d행", matched, len(FIELD_RULES), len(leases))

    return ExtractedListing(
        building=BuildingSummary(
            name=fields["name"],
            address=fields["address"],
            road_frontage=fields["road_frontage"],
            address_parts=parse_address(fields["address"]),
        ),
        land_info=LandInfo(
            area_sqm=fields["land_area_sqm"],
            area_pyeong=fields["land_area_pyeong"],
            zoning=fields["zoning"],
            assessed_price_per_pyeong=fields["assessed_price_per_pyeong"],
            assessed_price_total=fields["assessed_price_total"],
            land_category=fields["land_category"],
        ),
        building_info=BuildingInfo(
            total_area_sqm=fields["total_area_sqm"],
            total_area_pyeong=fields["total_area_pyeong"],
            footprint_area_sqm=fields["footprint_area_sqm"],
            footprint_area_pyeong=fields["footprint_area_pyeong"],
            coverage_ratio=fields["coverage_ratio"],
            floor_area_ratio=fields["floor_area_ratio"],
            floors=fields["floors"],
            basement_floors=basement,
            above_ground_floors=above,
            parking_spaces=fields["parking_spaces"],
            completion_date=fields["completion_date"],
            has_elevator=extract_elevator(text),
            structure=fields["structure"],
            primary_use=fields["primary_use"],
        ),
        price_info=PriceInfo(
            sale_price=fields["sale_price"],
            deposit=fields["deposit"],
            monthly_rent=fields["monthly_rent"],
            yield_rate=fields["yield_rate"],
            price_per_pyeong=fields["price_per_pyeong"],
            ai_estimate=fields["ai_estimate"],
            ai_estimate_per_pyeong=fields["ai_estimate_per_pyeong"],
        ),
        leases=leases,
    )
