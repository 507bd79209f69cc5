from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import JSON, BigInteger, Boolean, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from building_listing.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Building(Base):
    __tablename__ = "buildings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    address: Mapped[str] = mapped_column(String(500))
    road_frontage: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    # 관계 (1:1 상세 정보, 1:N 임대차). 건물 삭제 시 모두 함께 삭제된다.
    land_info: Mapped[Optional["LandInfo"]] = relationship(
        back_populates="building", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    building_info: Mapped[Optional["BuildingInfo"]] = relationship(
        back_populates="building", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    price_info: Mapped[Optional["PriceInfo"]] = relationship(
        back_populates="building", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    analysis_score: Mapped[Optional["AnalysisScore"]] = relationship(
        back_populates="building", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    leases: Mapped[list["Lease"]] = relationship(
        back_populates="building", cascade="all, delete-orphan", lazy="selectin", order_by="Lease.id"
    )


class LandInfo(Base):
    __tablename__ = "land_infos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), unique=True)
    area_sqm: Mapped[float] = mapped_column(Float, default=0.0)
    area_pyeong: Mapped[float] = mapped_column(Float, default=0.0)
    zoning: Mapped[str] = mapped_column(String(100), default="")
    assessed_price_per_pyeong: Mapped[int] = mapped_column(BigInteger, default=0)
    assessed_price_total: Mapped[int] = mapped_column(BigInteger, default=0)
    land_category: Mapped[str | None] = mapped_column(String(50), nullable=True)

    building: Mapped["Building"] = relationship(back_populates="land_info")


class BuildingInfo(Base):
    __tablename__ = "building_infos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), unique=True)
    total_area_sqm: Mapped[float] = mapped_column(Float, default=0.0)
    total_area_pyeong: Mapped[float] = mapped_column(Float, default=0.0)
    footprint_area_sqm: Mapped[float] = mapped_column(Float, default=0.0)
    footprint_area_pyeong: Mapped[float] = mapped_column(Float, default=0.0)
    coverage_ratio: Mapped[float] = mapped_column(Float, default=0.0)
    floor_area_ratio: Mapped[float] = mapped_column(Float, default=0.0)
    floors: Mapped[str] = mapped_column(String(50), default="")
    basement_floors: Mapped[int] = mapped_column(Integer, default=0)
    above_ground_floors: Mapped[int] = mapped_column(Integer, default=0)
    parking_spaces: Mapped[int] = mapped_column(Integer, default=0)
    completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    has_elevator: Mapped[bool] = mapped_column(Boolean, default=False)
    structure: Mapped[str | None] = mapped_column(String(200), nullable=True)
    primary_use: Mapped[str | None] = mapped_column(String(200), nullable=True)

    building: Mapped["Building"] = relationship(back_populates="building_info")


class PriceInfo(Base):
    __tablename__ = "price_infos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), unique=True)
    sale_price: Mapped[int] = mapped_column(BigInteger, default=0)
    deposit: Mapped[int] = mapped_column(BigInteger, default=0)
    monthly_rent: Mapped[int] = mapped_column(BigInteger, default=0)
    yield_rate: Mapped[float] = mapped_column(Float, default=0.0)
    price_per_pyeong: Mapped[int] = mapped_column(BigInteger, default=0)
    ai_estimate: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    ai_estimate_per_pyeong: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    building: Mapped["Building"] = relationship(back_populates="price_info")


class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), index=True)
    floor: Mapped[str] = mapped_column(String(50))
    tenant: Mapped[str] = mapped_column(String(200))
    area_sqm: Mapped[float] = mapped_column(Float, default=0.0)
    area_pyeong: Mapped[float] = mapped_column(Float, default=0.0)
    deposit: Mapped[int] = mapped_column(BigInteger, default=0)
    monthly_rent: Mapped[int] = mapped_column(BigInteger, default=0)
    management_fee: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    building: Mapped["Building"] = relationship(back_populates="leases")


class AnalysisScore(Base):
    __tablename__ = "analysis_scores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), unique=True)

    # 1. 입지 및 교통 편의성 (15%)
    accessibility_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    transport_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    development_plan_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 2. 건물 현황 및 상태분석 (10%)
    building_size_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    structure_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    building_age_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    maintenance_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 3. 법적·행정적 검토 (10%)
    illegal_building_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    harmful_facility_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    construction_limit_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 4~7. 가격 비교 (15/10/10/10%)
    sales_comparison_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    market_price_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ai_estimate_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    land_price_growth_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 8. 수익성 및 경제성 분석 (10%)
    rental_stability_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    operating_cost_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tax_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    yield_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vacancy_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 9. 개발 및 신축, 리모델링 계획 (10%)
    usage_change_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_construction_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    remodeling_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    additional_invest_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    profitability_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vacating_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # 점수 근거 (점수 키 → 설명)
    analysis_notes: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # 개별 점수로부터 매번 다시 계산되는 종합 점수
    total_score: Mapped[float] = mapped_column(Float, default=0.0)

    building: Mapped["Building"] = relationship(back_populates="analysis_score")
