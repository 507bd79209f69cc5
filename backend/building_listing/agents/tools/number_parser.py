"""숫자/금액 토큰 파서 - 콤마 구분 숫자와 억/만 단위 금액을 정수로 변환"""

from __future__ import annotations

import re

EOK = 100_000_000  # 억
MAN = 10_000  # 만

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_EOK_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*억")
_MAN_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*만")


def parse_number(text: str) -> float:
    """콤마를 제거하고 첫 번째 숫자를 float로 반환한다. 숫자가 없으면 0."""
    match = _NUMBER_RE.search(text.replace(",", ""))
    return float(match.group(0)) if match else 0.0


def parse_korean_price(text: str) -> int:
    """억/만 단위가 섞인 금액 표기를 원 단위 정수로 변환한다.

    "5억 1,300만원" → 513,000,000 처럼 두 단위가 함께 있으면 합산하고,
    단위가 없으면 숫자 그대로 사용한다.
    """
    total = 0.0

    eok_match = _EOK_RE.search(text)
    if eok_match:
        total += parse_number(eok_match.group(1)) * EOK

    man_match = _MAN_RE.search(text)
    if man_match:
        total += parse_number(man_match.group(1)) * MAN

    if not eok_match and not man_match:
        return int(parse_number(text))

    return int(round(total))


def format_price(value: int) -> str:
    """원 단위 금액을 억/만원 표기로 변환한다."""
    if value >= EOK:
        eok, rest = divmod(value, EOK)
        man = rest // MAN
        if man > 0:
            return f"{eok}억 {man:,}만원"
        return f"{eok}억원"
    if value >= MAN:
        return f"{value // MAN:,}만원"
    return f"{value:,}원"
