"""PDF 텍스트 추출 도구 - pdfplumber 기반 페이지별 텍스트 런 추출"""

from __future__ import annotations

import io
import logging

import pdfplumber

from building_listing.config import settings

logger = logging.getLogger(__name__)


async def extract_text_from_pdf(data: bytes) -> str:
    """PDF 바이트에서 텍스트를 추출한다.

    페이지마다 텍스트 런(단어)을 공백으로 잇고, 페이지 경계마다 줄바꿈을 넣는다.
    손상된 PDF면 pdfplumber/pdfminer 예외가 그대로 올라간다.
    """
    text = ""

    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            words = page.extract_words() or []
            text += " ".join(word["text"] for word in words) + "\n"

    logger.debug("PDF 텍스트 추출 완료: %d pages, %d chars", text.count("\n"), len(text))
    return text


def is_text_viable(text: str, min_length: int | None = None) -> bool:
    """패턴 추출이 가능할 만큼 텍스트가 있는지 판단한다 (미만이면 이미지 기반 PDF)."""
    threshold = settings.min_text_length if min_length is None else min_length
    return len(text.strip()) >= threshold
