"""빌딩 매물 PDF 분석용 LLM 프롬프트 (이미지 기반 PDF 폴백)"""

from building_listing.services.score_calculator import MAX_SCORE, MIN_SCORE, SCORE_GROUPS

SYSTEM_PROMPT = f"""\
당신은 빌딩 매물 정보 PDF를 분석하는 부동산 투자 전문가입니다.
PDF에서 정보를 추출하고, 투자 관점에서 각 항목별 점수({MIN_SCORE}-{MAX_SCORE}점)를 평가해주세요.
숫자는 모두 순수 숫자로 변환해주세요 (억, 만 단위는 원 단위로 변환).
찾을 수 없는 정보는 0 또는 빈 문자열로 반환해주세요.
PDF 정보만으로 판단이 어려운 점수 항목은 null로 표시해주세요.
"""


def _score_guide() -> str:
    lines = []
    for group in SCORE_GROUPS:
        lines.append(f"   [{group.label} - {round(group.weight * 100)}%]")
        for criterion in group.criteria:
            lines.append(f"   - {criterion.key}: {criterion.label} ({criterion.description})")
    return "\n".join(lines)


def _score_template() -> str:
    lines = [f'    "{key}": null,' for group in SCORE_GROUPS for key in group.keys]
    return "\n".join(lines)


USER_PROMPT = f"""\
이 빌딩 매물 PDF에서 다음 정보를 추출해주세요:

1. 건물 기본 정보: 건물명, 주소, 도로상황 (예: 8m*6m)
2. 토지 정보: 토지면적(㎡), 토지면적(평), 용도지역, 공시지가(평당, 원), 공시지가 합계(원), 지목
3. 건물 정보: 연면적(㎡/평), 건축면적(㎡/평), 건폐율(%), 용적률(%), 규모(예: B1/5F),
   지하층수, 지상층수, 주차대수, 준공일(YYYY-MM-DD), 승강기 유무, 구조, 주용도
4. 금액 정보: 매매가(원), 보증금 합계(원), 월 임대료 합계(원), 수익률(%), 평단가(원),
   AI 추정가(원, 있는 경우), AI 추정 평단가(원, 있는 경우)
5. 임대차 현황 (각 층별): 층, 임차인, 면적(㎡), 면적(평), 보증금(원), 월세(원), 비고

6. 투자 분석 점수 ({MIN_SCORE}-{MAX_SCORE}점, PDF 정보로 판단 불가시 null):
{_score_guide()}

   각 점수의 근거를 analysis_notes에 "점수 키": "근거" 형태로 적어주세요.

다음 JSON 형식으로만 응답해주세요 (다른 텍스트 없이):
{{
  "building": {{"name": "", "address": "", "road_frontage": ""}},
  "land_info": {{
    "area_sqm": 0, "area_pyeong": 0, "zoning": "",
    "assessed_price_per_pyeong": 0, "assessed_price_total": 0, "land_category": ""
  }},
  "building_info": {{
    "total_area_sqm": 0, "total_area_pyeong": 0,
    "footprint_area_sqm": 0, "footprint_area_pyeong": 0,
    "coverage_ratio": 0, "floor_area_ratio": 0,
    "floors": "", "basement_floors": 0, "above_ground_floors": 0,
    "parking_spaces": 0, "completion_date": "", "has_elevator": false,
    "structure": "", "primary_use": ""
  }},
  "price_info": {{
    "sale_price": 0, "deposit": 0, "monthly_rent": 0, "yield_rate": 0,
    "price_per_pyeong": 0, "ai_estimate": 0, "ai_estimate_per_pyeong": 0
  }},
  "leases": [
    {{"floor": "", "tenant": "", "area_sqm": 0, "area_pyeong": 0, "deposit": 0, "monthly_rent": 0, "notes": ""}}
  ],
  "analysis_score": {{
{_score_template()}
    "analysis_notes": {{}}
  }}
}}
"""
