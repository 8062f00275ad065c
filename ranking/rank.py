"""
급수(kyu/dan) ↔ 점수 변환

- 25k = 0점, 한 급마다 13점
- 1k 다음은 1d, 9d에서 상한
- 신규 가입자는 자기 급수 구간의 중간(+7점)에서 시작
"""
import re
from typing import List, Optional, Tuple

from loguru import logger

from .models import RankError, RankErrorKind, SeedResult


# =====================================================
# 상수 정의
# =====================================================

POINTS_PER_RANK = 13
MAX_KYU = 25
MAX_DAN = 9
KYU_RANK_COUNT = 24          # rank_index 0..24 → 25k..1k
SEED_OFFSET = 7              # 급수 구간 중간값 보정
DEFAULT_RANK = "15k"

# 이 점수 이상이면 항상 9d
MAX_DAN_POINTS = (KYU_RANK_COUNT + MAX_DAN) * POINTS_PER_RANK

RANK_PATTERN = re.compile(r"^([1-9][0-9]?)k$|^([1-9])d$")

# 약한 순 → 강한 순 (25k ... 1k, 1d ... 9d)
RANK_LABELS: List[str] = (
    [f"{kyu}k" for kyu in range(MAX_KYU, 0, -1)]
    + [f"{dan}d" for dan in range(1, MAX_DAN + 1)]
)


# =====================================================
# 변환 함수
# =====================================================

def parse_rank(rank: str) -> Optional[Tuple[int, str]]:
    """
    급수 문자열 파싱

    Returns:
        (단계, "k" 또는 "d") 또는 인식 불가 시 None
    """
    if not isinstance(rank, str):
        return None

    match = RANK_PATTERN.match(rank.strip().lower())
    if not match:
        return None

    kyu, dan = match.groups()
    if kyu is not None:
        level = int(kyu)
        if level > MAX_KYU:
            return None
        return level, "k"

    return int(dan), "d"


def is_valid_rank(rank: str) -> bool:
    return parse_rank(rank) is not None


def rank_index(rank: str) -> Optional[int]:
    """정렬용 순서값 (25k=0, 1k=24, 1d=25, 9d=33)"""
    parsed = parse_rank(rank)
    if parsed is None:
        return None
    level, kind = parsed
    if kind == "k":
        return MAX_KYU - level
    return KYU_RANK_COUNT + level


def rating_to_rank(points: int) -> str:
    """점수 → 급수 (0 미만은 0으로, 9d 상한)"""
    safe_points = max(0, points)
    index = safe_points // POINTS_PER_RANK

    if index <= KYU_RANK_COUNT:
        return f"{MAX_KYU - index}k"

    dan = min(MAX_DAN, index - KYU_RANK_COUNT)
    return f"{dan}d"


def _rank_band_start(level: int, kind: str) -> int:
    if kind == "k":
        return (MAX_KYU - level) * POINTS_PER_RANK
    return (KYU_RANK_COUNT + level) * POINTS_PER_RANK


def rank_to_rating(rank: str) -> int:
    """
    급수 → 초기 점수 (가입 시에만 사용)

    구간 중간(+7)에 배치하므로 rating_to_rank(rank_to_rating(r))가
    항상 r과 일치한다고 가정하면 안 된다.
    인식할 수 없는 급수는 15k 구간으로 대체.
    """
    parsed = parse_rank(rank)
    if parsed is None:
        parsed = parse_rank(DEFAULT_RANK)

    level, kind = parsed
    return _rank_band_start(level, kind) + SEED_OFFSET


def seed_rating(rank: str, default_rank: str = DEFAULT_RANK) -> SeedResult:
    """
    가입 급수로 초기 점수 계산

    인식 불가 급수는 default_rank로 대체하고 INVALID_RANK_FORMAT 오류 값을 함께 반환.
    """
    if is_valid_rank(rank):
        normalized = rank.strip().lower()
        return SeedResult(rating_points=rank_to_rating(normalized), rank=normalized)

    fallback = default_rank if is_valid_rank(default_rank) else DEFAULT_RANK
    logger.warning(f"인식할 수 없는 급수 '{rank}' → 기본 급수 {fallback} 적용")

    return SeedResult(
        rating_points=rank_to_rating(fallback),
        rank=fallback,
        error=RankError(
            kind=RankErrorKind.INVALID_RANK_FORMAT,
            message=f"급수 형식이 올바르지 않습니다: {rank!r}",
            value=rank,
        ),
    )
