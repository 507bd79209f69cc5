"""투자 분석 점수 계산 - 9개 항목 가중 평균으로 종합 점수 산출

개별 평가 점수는 1~10점 척도이며, 값이 없는 항목은 DEFAULT_SCORE로 채운다.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

MIN_SCORE = 1
MAX_SCORE = 10

# 평가 불가 항목을 채우는 중립 점수 (1~10 척도의 중간값)
DEFAULT_SCORE = 5.5


@dataclass(frozen=True)
class ScoreCriterion:
    key: str
    label: str
    description: str


@dataclass(frozen=True)
class ScoreGroup:
    name: str
    label: str
    weight: float
    criteria: tuple[ScoreCriterion, ...]

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(c.key for c in self.criteria)


SCORE_GROUPS: tuple[ScoreGroup, ...] = (
    ScoreGroup(
        "location_transport",
        "입지 및 교통 편의성",
        0.15,
        (
            ScoreCriterion("accessibility_score", "접근성", "대중교통, 도보 접근성"),
            ScoreCriterion("transport_score", "교통편의성", "지하철역 거리, 버스 노선"),
            ScoreCriterion("development_plan_score", "주변 개발 계획", "주변 개발 호재"),
        ),
    ),
    ScoreGroup(
        "building_status",
        "건물 현황 및 상태분석",
        0.10,
        (
            ScoreCriterion("building_size_score", "건물 규모", "연면적, 층수"),
            ScoreCriterion("structure_score", "구조", "건물 구조 형식"),
            ScoreCriterion("building_age_score", "연식", "준공년도 기준 경과 연수"),
            ScoreCriterion("maintenance_score", "유지관리", "유지관리 상태"),
        ),
    ),
    ScoreGroup(
        "legal_review",
        "법적·행정적 검토",
        0.10,
        (
            ScoreCriterion("illegal_building_score", "불법건축물", "위반건축물 여부"),
            ScoreCriterion("harmful_facility_score", "유해시설", "주변 혐오/유해시설 여부"),
            ScoreCriterion("construction_limit_score", "건축제한", "지구단위계획 등 건축제한 사항"),
        ),
    ),
    ScoreGroup(
        "sales_comparison",
        "매각사례 대비 매매가격",
        0.15,
        (ScoreCriterion("sales_comparison_score", "매각사례 비교", "인근 실거래 사례 대비 매매가"),),
    ),
    ScoreGroup(
        "market_price",
        "주변 시세 대비 매매가격",
        0.10,
        (ScoreCriterion("market_price_score", "주변 시세 비교", "주변 호가 시세 대비 매매가"),),
    ),
    ScoreGroup(
        "ai_estimate",
        "AI 추정가 대비 매매가격",
        0.10,
        (ScoreCriterion("ai_estimate_score", "AI 추정가 비교", "AI 추정가 대비 매매가"),),
    ),
    ScoreGroup(
        "land_price_growth",
        "공시지가 상승률",
        0.10,
        (ScoreCriterion("land_price_growth_score", "공시지가 상승률", "최근 공시지가 상승 추이"),),
    ),
    ScoreGroup(
        "profitability",
        "수익성 및 경제성 분석",
        0.10,
        (
            ScoreCriterion("rental_stability_score", "임대 안정성", "임차 구성과 계약 안정성"),
            ScoreCriterion("operating_cost_score", "운영비용", "관리/운영 비용 부담"),
            ScoreCriterion("tax_score", "세금", "취득세, 재산세 부담"),
            ScoreCriterion("yield_score", "수익률", "임대 수익률"),
            ScoreCriterion("vacancy_score", "공실률", "공실 위험"),
        ),
    ),
    ScoreGroup(
        "development",
        "개발 및 신축, 리모델링 계획",
        0.10,
        (
            ScoreCriterion("usage_change_score", "용도변경", "용도변경 가능성"),
            ScoreCriterion("new_construction_score", "신축", "신축 가능성"),
            ScoreCriterion("remodeling_score", "리모델링", "리모델링 가능성"),
            ScoreCriterion("additional_invest_score", "추가투자", "추가 투자 필요성"),
            ScoreCriterion("profitability_score", "사업 수익성", "개발 사업 수익성"),
            ScoreCriterion("vacating_score", "명도", "명도 난이도"),
        ),
    ),
)

RATING_KEYS: tuple[str, ...] = tuple(key for group in SCORE_GROUPS for key in group.keys)


def _score(scores: Mapping[str, Any], key: str) -> float:
    value = scores.get(key)
    return DEFAULT_SCORE if value is None else float(value)


def _group_average(group: ScoreGroup, scores: Mapping[str, Any]) -> float:
    return sum(_score(scores, key) for key in group.keys) / len(group.keys)


def calculate_group_scores(scores: Mapping[str, Any]) -> dict[str, float]:
    """항목별 평균 점수를 반환한다 (빈 값은 DEFAULT_SCORE)."""
    return {group.name: round(_group_average(group, scores), 2) for group in SCORE_GROUPS}


def calculate_total_score(scores: Mapping[str, Any]) -> float:
    """9개 항목 평균에 가중치를 곱해 합산한 종합 점수 (소수 둘째 자리 반올림)."""
    total = sum(_group_average(group, scores) * group.weight for group in SCORE_GROUPS)
    return round(total, 2)


def extract_valid_scores(payload: Mapping[str, Any]) -> dict[str, int]:
    """알려진 점수 키의 숫자 값만 골라낸다. null, Infinity/NaN과 그 외 키(analysis_notes 등)는 버린다."""
    result: dict[str, int] = {}
    for key in RATING_KEYS:
        value = payload.get(key)
        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if isinstance(value, float) and not math.isfinite(value):
            continue
        result[key] = int(value)
    return result


# ---------------------------------------------------------------------------
# 점수 입력 보조 (호출자가 미리 채울 때 사용)
# ---------------------------------------------------------------------------


def calculate_yield_score(yield_rate: float) -> int:
    """수익률(%) 기준 점수. 3.5% 이상이면 만점."""
    if yield_rate >= 3.5:
        return 10
    if yield_rate >= 3.0:
        return 8
    if yield_rate >= 2.5:
        return 6
    if yield_rate >= 2.0:
        return 4
    return 2


def calculate_building_age_score(completion_year: int, current_year: int | None = None) -> int:
    """준공 후 경과 연수 기준 점수."""
    age = (current_year or date.today().year) - completion_year

    if age <= 5:  # 신축
        return 10
    if age <= 10:  # 준신축
        return 8
    if age <= 20:
        return 6
    if age <= 30:
        return 4
    return 2


def calculate_ai_estimate_score(sale_price: int, ai_estimate: int) -> int:
    """AI 추정가 대비 매매가 점수. 추정가가 매매가 이상이면 만점."""
    if ai_estimate >= sale_price:
        return 10

    discount = (sale_price - ai_estimate) / sale_price * 100

    if discount < 10:
        return 8
    if discount < 20:
        return 6
    if discount < 30:
        return 4
    return 2


def get_grade(total_score: float) -> str:
    """종합 점수 등급 (S/A/B/C/D/F)."""
    if total_score >= 9:
        return "S"
    if total_score >= 8:
        return "A"
    if total_score >= 7:
        return "B"
    if total_score >= 6:
        return "C"
    if total_score >= 5:
        return "D"
    return "F"
