"""매물 PDF 파싱 엔드포인트 - 업로드된 PDF를 저장하지 않고 바로 파싱한다."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, UploadFile

from building_listing.agents.nodes.listing_parser import ListingParseError, parse_building_pdf
from building_listing.config import settings

logger = logging.getLogger("building_listing.pdf")

router = APIRouter()

MAX_FILE_SIZE = settings.max_file_size_mb * 1024 * 1024  # bytes
ALLOWED_CONTENT_TYPE = "application/pdf"


@router.post("/parse")
async def parse_pdf(file: UploadFile) -> dict:
    """매물 PDF를 파싱해 건물 정보를 반환합니다.

    1. 확장자/MIME 타입 검증 (PDF만 허용)
    2. 파일 크기 검증 (50MB 이하)
    3. 텍스트 패턴 추출, 이미지 기반 PDF면 문서 분석 API로 폴백
    """
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="PDF 파일만 업로드 가능합니다.")

    if file.content_type != ALLOWED_CONTENT_TYPE:
        raise HTTPException(status_code=400, detail="PDF 파일만 업로드 가능합니다.")

    if file.size is not None and file.size > MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail=f"파일 크기가 {settings.max_file_size_mb}MB를 초과합니다.")

    data = await file.read()
    if len(data) > MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail=f"파일 크기가 {settings.max_file_size_mb}MB를 초과합니다.")
    if not data:
        raise HTTPException(status_code=400, detail="빈 파일입니다.")

    try:
        result = await parse_building_pdf(data)
    except ListingParseError as exc:
        logger.error("PDF 파싱 실패: %s (%s)", file.filename, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    logger.info("PDF 파싱 완료: %s method=%s leases=%d", file.filename, result.method.value, len(result.listing.leases))
    return {"method": result.method.value, "data": asdict(result.listing)}
