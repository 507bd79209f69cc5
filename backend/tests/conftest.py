from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from building_listing.database import Base, get_db
from building_listing.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# 테스트마다 이벤트 루프가 바뀌므로 커넥션을 재사용하지 않는다
engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# 암사동 바이스트릿 매물 PDF에서 pdfplumber가 뽑아내는 형태의 텍스트
LISTING_TEXT = "\n".join(
    [
        "빌딩PT 프레젠테이션",
        "암사동 바이스트릿 (인수)",
        "소재지 서울 강동구 암사동 452-15",
        "도로상황 25m*4m (코너)",
        "토지면적 423.3㎡ 128.05평 지목 대 용도지역 제3종일반주거지역",
        "공시지가(평) 27,652,903원 공시지가 합계 3,540,904,500원",
        "연면적 731.16㎡ 221.18평 건축면적 189.71㎡ 57.39평",
        "건폐율 44.82% 용적률 160.96%",
        "규모 B1/4F 주차대수 5대 준공년도 1993-08-02 승강기 -",
        "구조 철근콘크리트조, 경량철골조 주용도 근린생활시설 및 주택",
        "매매가 55억 보증금 2억 월임대료 1,300만 수익률 2.94% 평단가 4,295만",
        "AI추정가 70억 9,431만원 AI평단가 32,076,319원",
        "임대차현황",
        "층 임차인 면적(㎡) 면적(평) 보증금 월세 비고",
        "4층 단독주택 132.58㎡ 40.1055평 0 0 인수조건",
        "3층 아름다운꿈의교회 189.71㎡ 57.3873평 0 0 인수조건",
        "2층 암사주짓수 (격투기) 183.38㎡ 55.4724평 0 0 인수조건",
        "1층 바이스트릿 강동점 (카페) 53.2㎡ 16.093평 0 0 인수조건",
        "1층 파리바게뜨 암사양지점 122.49㎡ 37.0532평 0 0 인수조건",
        "지하1층 근린생활시설 (사무실) 49.8㎡ 15.0645평 0 0 인수조건",
    ]
)

# 같은 매물에 대해 매긴 투자 분석 점수
SEED_RATINGS = {
    "accessibility_score": 9,
    "transport_score": 9,
    "development_plan_score": 6,
    "building_size_score": 7,
    "structure_score": 7,
    "building_age_score": 4,
    "maintenance_score": 6,
    "illegal_building_score": 10,
    "harmful_facility_score": 9,
    "construction_limit_score": 7,
    "sales_comparison_score": 8,
    "market_price_score": 8,
    "ai_estimate_score": 10,
    "land_price_growth_score": 7,
    "rental_stability_score": 8,
    "operating_cost_score": 7,
    "tax_score": 6,
    "yield_score": 6,
    "vacancy_score": 10,
    "usage_change_score": 7,
    "new_construction_score": 6,
    "remodeling_score": 7,
    "additional_invest_score": 6,
    "profitability_score": 7,
    "vacating_score": 3,
}


@pytest.fixture
def listing_text() -> str:
    return LISTING_TEXT


@pytest.fixture
def seed_ratings() -> dict[str, int]:
    return dict(SEED_RATINGS)
