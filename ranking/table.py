"""
치수 × 덤 기준표

행: 치석 0, 2, 3, ..., 9
열: 덤 +6.5 ~ -5.5 (13칸)
각 칸의 점수 차이는 행에 저장하지 않고 cell_rating_difference로 계산한다.
"""
from typing import List, Optional

from .config import KomiPolicy
from .models import RatingTableRow, TablePosition
from .pairing import (
    MAX_HANDICAP,
    MAX_TABLE_DIFF,
    MIN_HANDICAP,
    STANDARD_KOMI,
    handicap_for_difference,
)
from .rank import POINTS_PER_RANK


TABLE_COLUMNS = POINTS_PER_RANK

KOMI_ROW = tuple(STANDARD_KOMI - position for position in range(TABLE_COLUMNS))


def generate_table(max_handicap: int = MAX_HANDICAP) -> List[RatingTableRow]:
    """기준표 생성 - 모든 행이 같은 13개 덤 값을 가진다"""
    table = [RatingTableRow(handicap_stones=0, komi_values=KOMI_ROW)]

    for handicap in range(MIN_HANDICAP, max_handicap + 1):
        table.append(RatingTableRow(handicap_stones=handicap, komi_values=KOMI_ROW))

    return table


def cell_rating_difference(row_index: int, col_index: int) -> int:
    """표 칸 (행, 열)의 점수 차이"""
    if row_index == 0:
        return col_index
    return POINTS_PER_RANK + (row_index - 1) * POINTS_PER_RANK + col_index


def table_bounds() -> int:
    """표에 실리는 최대 점수 차이"""
    return MAX_TABLE_DIFF


def table_position(
    rating_difference: int,
    policy: KomiPolicy = KomiPolicy.UNBOUNDED,
) -> Optional[TablePosition]:
    """
    점수 차이 → 강조할 칸

    UNBOUNDED 정책에서는 표 밖(> 116)이면 None (강조 없음).
    CYCLIC 정책에서는 치석 9점 행에서 13칸 주기로 순환.
    """
    if rating_difference < 0:
        return None

    if rating_difference == 0:
        # 돌가리기 - 덤 6.5 칸
        return TablePosition(handicap_stones=0, komi_index=0)

    if rating_difference > MAX_TABLE_DIFF and policy == KomiPolicy.UNBOUNDED:
        return None

    return TablePosition(
        handicap_stones=handicap_for_difference(rating_difference),
        komi_index=rating_difference % POINTS_PER_RANK,
    )
