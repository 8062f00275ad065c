"""
대국 배정 계산 - 흑백, 치석, 덤

점수 차이 13점 = 한 급.
- 0~12점: 호선, 덤만 조정 (+6.5 → -5.5)
- 13점부터 13점마다 치석 1개 증가 (2점 ~ 9점)
- 같은 점수: 돌가리기(nigiri), 덤 6.5
"""
from typing import Optional

from .config import KomiPolicy
from .models import GameSettings, PairingResult, PlayerRef, RankError, RankErrorKind
from .rank import POINTS_PER_RANK


STANDARD_KOMI = 6.5
MIN_HANDICAP = 2
MAX_HANDICAP = 9
EVEN_GAME_MAX_DIFF = POINTS_PER_RANK - 1          # 12
# 치석 9점 행의 마지막 칸 (표가 끝나는 지점)
MAX_TABLE_DIFF = POINTS_PER_RANK * (MAX_HANDICAP - MIN_HANDICAP + 2) - 1   # 116
MIN_TABLE_KOMI = STANDARD_KOMI - (POINTS_PER_RANK - 1)                      # -5.5


def handicap_for_difference(rating_difference: int) -> int:
    """점수 차이 → 치석 수 (0 또는 2~9)"""
    if rating_difference <= EVEN_GAME_MAX_DIFF:
        return 0
    return min(
        MAX_HANDICAP,
        (rating_difference - POINTS_PER_RANK) // POINTS_PER_RANK + MIN_HANDICAP,
    )


def komi_for_difference(
    rating_difference: int,
    policy: KomiPolicy = KomiPolicy.UNBOUNDED,
) -> float:
    """
    점수 차이 → 덤

    표 범위(<= 116)에서는 13점 구간마다 +6.5 → -5.5.
    그 이상은 정책에 따라 계속 감소(UNBOUNDED)하거나 구간 순환(CYCLIC).
    """
    if rating_difference <= MAX_TABLE_DIFF or policy == KomiPolicy.CYCLIC:
        return STANDARD_KOMI - (rating_difference % POINTS_PER_RANK)

    # 치석은 이미 9점 상한 - 덤으로만 차이를 반영
    return MIN_TABLE_KOMI - (rating_difference - MAX_TABLE_DIFF)


def compute_settings(
    player_a: PlayerRef,
    player_b: PlayerRef,
    policy: KomiPolicy = KomiPolicy.UNBOUNDED,
) -> GameSettings:
    """
    두 선수의 점수로 대국 설정 계산

    같은 점수면 돌가리기로 표시하되, 재현성을 위해 첫 번째 선수를 흑으로 둔다.
    다르면 점수가 낮은 선수가 흑.
    """
    rating_difference = abs(player_a.rating_points - player_b.rating_points)

    if rating_difference == 0:
        return GameSettings(
            black_player=player_a,
            white_player=player_b,
            rating_difference=0,
            handicap_stones=0,
            komi=STANDARD_KOMI,
            is_nigiri=True,
        )

    if player_a.rating_points < player_b.rating_points:
        black_player, white_player = player_a, player_b
    else:
        black_player, white_player = player_b, player_a

    return GameSettings(
        black_player=black_player,
        white_player=white_player,
        rating_difference=rating_difference,
        handicap_stones=handicap_for_difference(rating_difference),
        komi=komi_for_difference(rating_difference, policy),
        is_nigiri=False,
    )


def pair_players(
    player_a: PlayerRef,
    player_b: PlayerRef,
    policy: KomiPolicy = KomiPolicy.UNBOUNDED,
) -> PairingResult:
    """자기 자신과의 대국은 계산 전에 거부"""
    if player_a.id == player_b.id:
        return PairingResult(
            error=RankError(
                kind=RankErrorKind.INVALID_PLAYER_PAIR,
                message="같은 선수끼리는 대국을 배정할 수 없습니다",
                value=player_a.id,
            )
        )
    return PairingResult(settings=compute_settings(player_a, player_b, policy))


def format_komi(komi: float) -> str:
    """덤 표시 - 0 이상은 '+' 부호 명시 (+6.5, -5.5)"""
    if komi >= 0:
        return f"+{komi}"
    return str(komi)


def reverse_komi_hint(settings: GameSettings) -> Optional[str]:
    """역덤일 때 흑이 받는 집 수 안내"""
    if settings.komi >= 0:
        return None
    return f"Black gets {abs(settings.komi)} points"
