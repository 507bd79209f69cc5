"""매물 PDF 파싱 노드 - 텍스트 패턴 추출, 실패 시 문서 이해 LLM 폴백

처리 흐름:
1. PDF 텍스트 추출 (실패하면 바로 폴백)
2. 텍스트가 기준 길이 미만이면 이미지 기반 PDF로 보고 폴백
3. 패턴 추출기로 매물 정보 조립 (분석 점수 없음)
4. 폴백: PDF 원본을 LLM에 보내 매물 정보 + 분석 점수 JSON을 받아 정규화
"""

from __future__ import annotations

import base64
import json
import logging
import math
import re
from typing import Any

from anthropic import APIError, AsyncAnthropic

from building_listing.agents.prompts.listing_prompts import SYSTEM_PROMPT, USER_PROMPT
from building_listing.agents.tools.field_extractors import (
    extract_listing,
    parse_address,
    parse_date,
    parse_floors,
)
from building_listing.agents.tools.number_parser import parse_korean_price, parse_number
from building_listing.agents.tools.pdf_extractor import extract_text_from_pdf, is_text_viable
from building_listing.config import settings
from building_listing.schemas.listing import (
    BuildingInfo,
    BuildingSummary,
    ExtractedListing,
    ExtractionMethod,
    LandInfo,
    LeaseEntry,
    ParseResult,
    PriceInfo,
)
from building_listing.services.score_calculator import RATING_KEYS

logger = logging.getLogger(__name__)

# 파싱 실패 메시지에 포함할 원문 응답 길이
_EXCERPT_LENGTH = 500

_client: AsyncAnthropic | None = None


class ListingParseError(Exception):
    """PDF 한 건의 파싱이 끝내 실패했을 때 발생한다 (재시도 없음)."""


def _get_client() -> AsyncAnthropic:
    global _client
    if not settings.anthropic_api_key:
        raise ListingParseError("ANTHROPIC_API_KEY가 설정되지 않았습니다. .env 파일에 API 키를 추가해주세요.")
    if _client is None:
        _client = AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


# ---------------------------------------------------------------------------
# LLM 응답 JSON 파싱
# ---------------------------------------------------------------------------


def _fix_json(text: str) -> str:
    """LLM이 생성한 JSON의 흔한 오류(후행 콤마)를 수정한다."""
    return re.sub(r",\s*([}\]])", r"\1", text)


def _try_parse(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return json.loads(_fix_json(raw))


def _parse_json_response(text: str) -> Any:
    """LLM 응답에서 JSON을 추출한다."""
    # 1. ```json ... ``` 블록
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if match:
        return _try_parse(match.group(1).strip())
    # 2. 텍스트 내 첫 번째 { ... } 블록
    match = re.search(r"\{[\s\S]*\}", text)
    if match:
        return _try_parse(match.group(0))
    # 3. 전체가 JSON
    return _try_parse(text.strip())


# ---------------------------------------------------------------------------
# 응답 값 정규화
# ---------------------------------------------------------------------------


def _as_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return parse_number(str(value))


def _as_int(value: Any) -> int:
    """숫자 또는 "55억" 같은 금액 문자열을 정수로 변환한다."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # json.loads는 Infinity, NaN도 숫자로 받아들인다
        return int(value) if math.isfinite(value) else 0
    return parse_korean_price(str(value))


def _as_optional_int(value: Any) -> int | None:
    amount = _as_int(value)
    return amount or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "y", "있음", "유"}
    return bool(value)


def _as_rating(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return int(round(number)) if math.isfinite(number) else None


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _normalize_lease(raw: dict[str, Any]) -> LeaseEntry:
    # 모델이 notes 대신 note를 쓰는 경우가 있다
    notes = raw.get("notes") or raw.get("note")
    return LeaseEntry(
        floor=_as_str(raw.get("floor")),
        tenant=_as_str(raw.get("tenant")),
        area_sqm=_as_float(raw.get("area_sqm")),
        area_pyeong=_as_float(raw.get("area_pyeong")),
        deposit=_as_int(raw.get("deposit")),
        monthly_rent=_as_int(raw.get("monthly_rent")),
        notes=_as_str(notes) or None,
    )


def listing_from_dict(data: dict[str, Any]) -> ExtractedListing:
    """LLM 응답 JSON을 ExtractedListing으로 정규화한다."""
    building = _section(data, "building")
    land = _section(data, "land_info")
    info = _section(data, "building_info")
    price = _section(data, "price_info")

    floors = _as_str(info.get("floors"))
    basement = _as_int(info.get("basement_floors"))
    above = _as_int(info.get("above_ground_floors"))
    if not basement and not above and floors:
        basement, above = parse_floors(floors)

    completion = info.get("completion_date")
    completion_date = parse_date(completion) if isinstance(completion, str) and completion else None

    leases = [_normalize_lease(lease) for lease in data.get("leases") or [] if isinstance(lease, dict)]

    analysis_score: dict[str, int | None] | None = None
    analysis_notes: dict[str, str] = {}
    raw_scores = data.get("analysis_score")
    if isinstance(raw_scores, dict):
        analysis_score = {key: _as_rating(raw_scores.get(key)) for key in RATING_KEYS}
        raw_notes = raw_scores.get("analysis_notes") or data.get("analysis_notes") or {}
        if isinstance(raw_notes, dict):
            analysis_notes = {str(k): _as_str(v) for k, v in raw_notes.items() if v}

    address = _as_str(building.get("address"))

    return ExtractedListing(
        building=BuildingSummary(
            name=_as_str(building.get("name")),
            address=address,
            road_frontage=_as_str(building.get("road_frontage")),
            address_parts=parse_address(address),
        ),
        land_info=LandInfo(
            area_sqm=_as_float(land.get("area_sqm")),
            area_pyeong=_as_float(land.get("area_pyeong")),
            zoning=_as_str(land.get("zoning")),
            assessed_price_per_pyeong=_as_int(land.get("assessed_price_per_pyeong")),
            assessed_price_total=_as_int(land.get("assessed_price_total")),
            land_category=_as_str(land.get("land_category")),
        ),
        building_info=BuildingInfo(
            total_area_sqm=_as_float(info.get("total_area_sqm")),
            total_area_pyeong=_as_float(info.get("total_area_pyeong")),
            footprint_area_sqm=_as_float(info.get("footprint_area_sqm")),
            footprint_area_pyeong=_as_float(info.get("footprint_area_pyeong")),
            coverage_ratio=_as_float(info.get("coverage_ratio")),
            floor_area_ratio=_as_float(info.get("floor_area_ratio")),
            floors=floors,
            basement_floors=basement,
            above_ground_floors=above,
            parking_spaces=_as_int(info.get("parking_spaces")),
            completion_date=completion_date,
            has_elevator=_as_bool(info.get("has_elevator")),
            structure=_as_str(info.get("structure")),
            primary_use=_as_str(info.get("primary_use")),
        ),
        price_info=PriceInfo(
            sale_price=_as_int(price.get("sale_price")),
            deposit=_as_int(price.get("deposit")),
            monthly_rent=_as_int(price.get("monthly_rent")),
            yield_rate=_as_float(price.get("yield_rate")),
            price_per_pyeong=_as_int(price.get("price_per_pyeong")),
            ai_estimate=_as_optional_int(price.get("ai_estimate")),
            ai_estimate_per_pyeong=_as_optional_int(price.get("ai_estimate_per_pyeong")),
        ),
        leases=leases,
        analysis_score=analysis_score,
        analysis_notes=analysis_notes,
    )


# ---------------------------------------------------------------------------
# 문서 이해 LLM 폴백
# ---------------------------------------------------------------------------


async def _call_document_llm(data: bytes) -> str:
    """PDF 원본을 base64 document 블록으로 보내고 텍스트 응답을 받는다."""
    client = _get_client()
    try:
        response = await client.messages.create(
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            system=SYSTEM_PROMPT,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "document",
                            "source": {
                                "type": "base64",
                                "media_type": "application/pdf",
                                "data": base64.standard_b64encode(data).decode("ascii"),
                            },
                        },
                        {"type": "text", "text": USER_PROMPT},
                    ],
                }
            ],
        )
    except APIError as exc:
        raise ListingParseError(f"문서 분석 API 호출에 실패했습니다: {exc}") from exc

    text = next((block.text for block in response.content if block.type == "text"), None)
    if not text:
        raise ListingParseError("문서 분석 API 응답에서 텍스트를 찾을 수 없습니다.")
    return text


async def extract_listing_with_llm(data: bytes) -> ExtractedListing:
    """문서 이해 LLM으로 매물 정보와 분석 점수를 추출한다. 실패는 모두 ListingParseError."""
    logger.info("문서 분석 API 호출: %d bytes", len(data))
    raw = await _call_document_llm(data)

    try:
        parsed = _parse_json_response(raw)
    except json.JSONDecodeError as exc:
        excerpt = raw[:_EXCERPT_LENGTH]
        logger.error("문서 분석 응답 JSON 파싱 실패: %s", excerpt)
        raise ListingParseError(f"문서 분석 API 응답을 파싱할 수 없습니다: {excerpt}") from exc

    if not isinstance(parsed, dict):
        raise ListingParseError(f"문서 분석 API 응답이 JSON 객체가 아닙니다: {raw[:_EXCERPT_LENGTH]}")

    return listing_from_dict(parsed)


# ---------------------------------------------------------------------------
# 진입점
# ---------------------------------------------------------------------------


async def parse_building_pdf(data: bytes) -> ParseResult:
    """매물 PDF 한 건을 파싱한다."""
    logger.info("PDF 파싱 시작: %d bytes", len(data))

    try:
        text = await extract_text_from_pdf(data)
    except Exception as exc:
        logger.warning("PDF 텍스트 추출 실패, 문서 분석 API로 전환: %s", exc)
        return ParseResult(method=ExtractionMethod.LLM, listing=await extract_listing_with_llm(data))

    if not is_text_viable(text):
        logger.info("텍스트 %d자 - 이미지 기반 PDF로 판단, 문서 분석 API 사용", len(text.strip()))
        return ParseResult(method=ExtractionMethod.LLM, listing=await extract_listing_with_llm(data))

    logger.debug("PDF 텍스트 (앞 500자): %s", text[:500])
    return ParseResult(method=ExtractionMethod.PATTERN, listing=extract_listing(text))
