"""
급수 히스테리시스

급수가 바뀐 뒤 FREEZE_PERIOD 대국 동안은 표시 급수를 고정하고 '*'를 붙인다.
"""
from .models import PlayerRankState, RankUpdate
from .rank import rating_to_rank


FREEZE_PERIOD = 5
FROZEN_MARK = "*"


def is_rank_frozen(state: PlayerRankState, freeze_period: int = FREEZE_PERIOD) -> bool:
    return state.games_since_last_rank_change < freeze_period


def games_until_unfrozen(state: PlayerRankState, freeze_period: int = FREEZE_PERIOD) -> int:
    """고정 해제까지 남은 대국 수 (해제 상태면 0)"""
    return max(0, freeze_period - state.games_since_last_rank_change)


def display_rank(state: PlayerRankState, freeze_period: int = FREEZE_PERIOD) -> str:
    """표시용 급수 - 고정 기간 중에는 마지막 확정 급수 + '*'"""
    if state.games_since_last_rank_change >= freeze_period:
        return rating_to_rank(state.rating_points)
    return f"{state.last_rank_reached}{FROZEN_MARK}"


def apply_game_result(
    state: PlayerRankState,
    rating_delta: int,
    freeze_period: int = FREEZE_PERIOD,
) -> RankUpdate:
    """
    대국 결과 반영

    1. 점수 = max(0, 점수 + 변동)
    2. 이번 대국을 포함한 카운터가 freeze_period 이상이고
       새 점수의 급수가 마지막 확정 급수와 다르면 → 급수 확정, 카운터 0
    3. 그 외에는 확정 급수 유지, 카운터 +1

    입력 state는 수정하지 않고 새 상태를 반환한다.
    """
    raw_points = state.rating_points + rating_delta
    new_points = max(0, raw_points)
    counter_after_game = state.games_since_last_rank_change + 1
    candidate_rank = rating_to_rank(new_points)

    if counter_after_game >= freeze_period and candidate_rank != state.last_rank_reached:
        new_state = PlayerRankState(
            rating_points=new_points,
            last_rank_reached=candidate_rank,
            games_since_last_rank_change=0,
        )
        return RankUpdate(state=new_state, rank_changed=True, clamped=raw_points < 0)

    new_state = PlayerRankState(
        rating_points=new_points,
        last_rank_reached=state.last_rank_reached,
        games_since_last_rank_change=counter_after_game,
    )
    return RankUpdate(state=new_state, rank_changed=False, clamped=raw_points < 0)
