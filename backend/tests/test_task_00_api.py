"""Task-00: 건물 매물 API (CRUD + 분석 점수 + 임대차 + PDF 파싱)"""

from __future__ import annotations

import io
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from building_listing.agents.nodes.listing_parser import ListingParseError
from building_listing.schemas.listing import (
    BuildingInfo,
    BuildingSummary,
    ExtractedListing,
    ExtractionMethod,
    LandInfo,
    ParseResult,
    PriceInfo,
)

pytestmark = pytest.mark.asyncio


def _payload(analysis_score: dict | None = None) -> dict:
    payload = {
        "building": {
            "name": "암사동 바이스트릿 (인수)",
            "address": "서울 강동구 암사동 452-15",
            "road_frontage": "25m*4m (코너)",
        },
        "land_info": {
            "area_sqm": 423.3,
            "area_pyeong": 128.05,
            "zoning": "제3종일반주거지역",
            "assessed_price_per_pyeong": 27652903,
            "assessed_price_total": 3540904500,
            "land_category": "대",
        },
        "building_info": {
            "total_area_sqm": 731.16,
            "total_area_pyeong": 221.18,
            "floors": "B1/4F",
            "basement_floors": 1,
            "above_ground_floors": 4,
            "parking_spaces": 5,
            "completion_date": "1993-08-02",
            "has_elevator": False,
        },
        "price_info": {
            "sale_price": 5500000000,
            "deposit": 200000000,
            "monthly_rent": 13000000,
            "yield_rate": 2.94,
            "price_per_pyeong": 42950000,
            "ai_estimate": 7094310000,
        },
        "leases": [
            {"floor": "4층", "tenant": "단독주택", "area_sqm": 132.58, "area_pyeong": 40.1055, "notes": "인수조건"},
            {"floor": "지하1층", "tenant": "근린생활시설 (사무실)", "area_sqm": 49.8, "area_pyeong": 15.0645},
        ],
    }
    if analysis_score is not None:
        payload["analysis_score"] = analysis_score
    return payload


async def _create(client: AsyncClient, analysis_score: dict | None = None) -> dict:
    resp = await client.post("/api/v1/buildings", json=_payload(analysis_score))
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# 헬스체크 / 건물 CRUD
# ---------------------------------------------------------------------------


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_create_building_with_details(client: AsyncClient) -> None:
    data = await _create(client)

    assert data["id"] > 0
    assert data["name"] == "암사동 바이스트릿 (인수)"
    assert data["land_info"]["assessed_price_total"] == 3540904500
    assert data["building_info"]["completion_date"] == "1993-08-02"
    assert data["price_info"]["ai_estimate"] == 7094310000
    assert data["sale_price_label"] == "55억원"
    assert [lease["floor"] for lease in data["leases"]] == ["4층", "지하1층"]
    # 점수 없이 등록하면 점수 레코드도 없다
    assert data["analysis_score"] is None


async def test_create_building_with_scores_computes_total(client: AsyncClient, seed_ratings: dict) -> None:
    # 요청에 들어온 total_score는 무시된다
    data = await _create(client, {**seed_ratings, "total_score": 1.0, "analysis_notes": {"vacating_score": "인수조건"}})

    score = data["analysis_score"]
    assert score["total_score"] == pytest.approx(7.71)
    assert score["grade"] == "B"
    assert score["group_scores"]["location_transport"] == pytest.approx(8.0)
    assert score["analysis_notes"] == {"vacating_score": "인수조건"}


async def test_get_and_list_buildings(client: AsyncClient) -> None:
    first = await _create(client)
    second = await _create(client)

    resp = await client.get(f"/api/v1/buildings/{first['id']}")
    assert resp.status_code == 200
    assert resp.json()["address"] == "서울 강동구 암사동 452-15"

    resp = await client.get("/api/v1/buildings")
    assert resp.status_code == 200
    ids = [b["id"] for b in resp.json()]
    assert set(ids) == {first["id"], second["id"]}


async def test_get_building_not_found(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/buildings/9999")
    assert resp.status_code == 404
    assert "찾을 수 없습니다" in resp.json()["detail"]


async def test_update_building_sections(client: AsyncClient) -> None:
    created = await _create(client)

    resp = await client.put(
        f"/api/v1/buildings/{created['id']}",
        json={
            "building": {"name": "암사동 바이스트릿", "address": "서울 강동구 암사동 452-15"},
            "price_info": {"sale_price": 5000000000, "yield_rate": 3.1},
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "암사동 바이스트릿"
    assert data["price_info"]["sale_price"] == 5000000000
    assert data["price_info"]["yield_rate"] == pytest.approx(3.1)
    # 전달하지 않은 섹션은 그대로
    assert data["land_info"]["area_sqm"] == pytest.approx(423.3)


async def test_delete_building_cascades(client: AsyncClient) -> None:
    created = await _create(client)
    lease_id = created["leases"][0]["id"]

    resp = await client.delete(f"/api/v1/buildings/{created['id']}")
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/buildings/{created['id']}")
    assert resp.status_code == 404

    resp = await client.delete(f"/api/v1/leases/{lease_id}")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 분석 점수
# ---------------------------------------------------------------------------


async def test_update_analysis_score_creates_record(client: AsyncClient) -> None:
    created = await _create(client)

    resp = await client.put(
        f"/api/v1/buildings/{created['id']}/analysis-score",
        json={"ai_estimate_score": 10, "unknown_score": 3, "total_score": 1.0},
    )
    assert resp.status_code == 200
    score = resp.json()
    assert score["ai_estimate_score"] == 10
    assert "unknown_score" not in score
    # 나머지 8개 항목은 5.5로 채워진다: 10 * 0.1 + 5.5 * 0.9
    assert score["total_score"] == pytest.approx(5.95)


async def test_update_analysis_score_merges_and_recomputes(client: AsyncClient) -> None:
    created = await _create(client)
    url = f"/api/v1/buildings/{created['id']}/analysis-score"

    await client.put(url, json={"ai_estimate_score": 10})
    resp = await client.put(
        url,
        json={"ai_estimate_score": None, "land_price_growth_score": 10, "analysis_notes": {"ai_estimate_score": "추정가 70억"}},
    )
    assert resp.status_code == 200
    score = resp.json()
    # null은 기존 값을 유지하고, 종합 점수는 저장된 전체 점수로 다시 계산된다
    assert score["ai_estimate_score"] == 10
    assert score["land_price_growth_score"] == 10
    assert score["total_score"] == pytest.approx(6.4)
    assert score["analysis_notes"] == {"ai_estimate_score": "추정가 70억"}

    resp = await client.get(f"/api/v1/buildings/{created['id']}")
    assert resp.json()["analysis_score"]["total_score"] == pytest.approx(6.4)


async def test_update_analysis_score_ignores_non_finite(client: AsyncClient) -> None:
    created = await _create(client)

    # Infinity/NaN은 표준 JSON이 아니므로 본문을 직접 보낸다
    resp = await client.put(
        f"/api/v1/buildings/{created['id']}/analysis-score",
        content='{"tax_score": Infinity, "yield_score": NaN, "vacancy_score": 8}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    score = resp.json()
    assert score["tax_score"] is None
    assert score["yield_score"] is None
    assert score["vacancy_score"] == 8
    # 수익성 그룹 (5.5 * 4 + 8) / 5 = 6.0, 나머지는 5.5
    assert score["total_score"] == pytest.approx(5.55)


async def test_update_analysis_score_not_found(client: AsyncClient) -> None:
    resp = await client.put("/api/v1/buildings/9999/analysis-score", json={"tax_score": 5})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 임대차
# ---------------------------------------------------------------------------


async def test_add_and_delete_lease(client: AsyncClient) -> None:
    created = await _create(client)

    resp = await client.post(
        f"/api/v1/buildings/{created['id']}/leases",
        json={"floor": "1층", "tenant": "파리바게뜨 암사양지점", "area_sqm": 122.49, "deposit": 50000000},
    )
    assert resp.status_code == 201
    lease = resp.json()
    assert lease["tenant"] == "파리바게뜨 암사양지점"
    assert lease["deposit"] == 50000000

    resp = await client.get(f"/api/v1/buildings/{created['id']}")
    assert len(resp.json()["leases"]) == 3

    resp = await client.delete(f"/api/v1/leases/{lease['id']}")
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/buildings/{created['id']}")
    assert [l["id"] for l in resp.json()["leases"]] == [l["id"] for l in created["leases"]]


async def test_add_lease_building_not_found(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/buildings/9999/leases", json={"floor": "1층", "tenant": "카페"})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# PDF 파싱
# ---------------------------------------------------------------------------


def _parse_result() -> ParseResult:
    listing = ExtractedListing(
        building=BuildingSummary(name="암사동 바이스트릿 (인수)", address="서울 강동구 암사동 452-15"),
        land_info=LandInfo(area_sqm=423.3),
        building_info=BuildingInfo(completion_date=date(1993, 8, 2)),
        price_info=PriceInfo(sale_price=5500000000),
        leases=[],
    )
    return ParseResult(method=ExtractionMethod.PATTERN, listing=listing)


async def test_parse_pdf_success(client: AsyncClient) -> None:
    with patch(
        "building_listing.api.v1.pdf.parse_building_pdf",
        new_callable=AsyncMock,
        return_value=_parse_result(),
    ) as mock_parse:
        resp = await client.post(
            "/api/v1/pdf/parse",
            files={"file": ("listing.pdf", io.BytesIO(b"%PDF-1.4 fake"), "application/pdf")},
        )

    assert resp.status_code == 200
    body = resp.json()
    assert body["method"] == "pattern"
    assert body["data"]["building"]["name"] == "암사동 바이스트릿 (인수)"
    assert body["data"]["building_info"]["completion_date"] == "1993-08-02"
    assert body["data"]["price_info"]["sale_price"] == 5500000000
    mock_parse.assert_awaited_once_with(b"%PDF-1.4 fake")


async def test_parse_pdf_rejects_non_pdf(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pdf/parse",
        files={"file": ("listing.txt", io.BytesIO(b"hello"), "text/plain")},
    )
    assert resp.status_code == 400
    assert "PDF" in resp.json()["detail"]


async def test_parse_pdf_rejects_oversize(client: AsyncClient) -> None:
    with patch("building_listing.api.v1.pdf.MAX_FILE_SIZE", 10):
        resp = await client.post(
            "/api/v1/pdf/parse",
            files={"file": ("big.pdf", io.BytesIO(b"%PDF-1.4 " + b"x" * 100), "application/pdf")},
        )
    assert resp.status_code == 413


async def test_parse_pdf_failure_returns_502(client: AsyncClient) -> None:
    with patch(
        "building_listing.api.v1.pdf.parse_building_pdf",
        new_callable=AsyncMock,
        side_effect=ListingParseError("문서 분석 API 응답을 파싱할 수 없습니다: oops"),
    ):
        resp = await client.post(
            "/api/v1/pdf/parse",
            files={"file": ("scan.pdf", io.BytesIO(b"%PDF-1.4 scan"), "application/pdf")},
        )
    assert resp.status_code == 502
    assert "파싱할 수 없습니다" in resp.json()["detail"]
