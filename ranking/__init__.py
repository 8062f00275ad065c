"""
Zugol 랭킹 엔진

바둑 급수/점수 변환, 급수 히스테리시스, 대국 배정(치석/덤) 계산 모듈
"""
from .config import KomiPolicy, RankingConfig, ranking_config
from .models import (
    RankErrorKind,
    RankError,
    PlayerRankState,
    RankUpdate,
    SeedResult,
    PlayerRef,
    GameSettings,
    PairingResult,
    RatingTableRow,
    TablePosition,
)
from .rank import (
    RANK_LABELS,
    parse_rank,
    is_valid_rank,
    rank_index,
    rating_to_rank,
    rank_to_rating,
    seed_rating,
)
from .hysteresis import (
    FREEZE_PERIOD,
    display_rank,
    apply_game_result,
    is_rank_frozen,
    games_until_unfrozen,
)
from .pairing import (
    compute_settings,
    pair_players,
    handicap_for_difference,
    komi_for_difference,
    format_komi,
    reverse_komi_hint,
)
from .table import (
    generate_table,
    cell_rating_difference,
    table_position,
    table_bounds,
)

__all__ = [
    "KomiPolicy",
    "RankingConfig",
    "ranking_config",
    "RankErrorKind",
    "RankError",
    "PlayerRankState",
    "RankUpdate",
    "SeedResult",
    "PlayerRef",
    "GameSettings",
    "PairingResult",
    "RatingTableRow",
    "TablePosition",
    "RANK_LABELS",
    "parse_rank",
    "is_valid_rank",
    "rank_index",
    "rating_to_rank",
    "rank_to_rating",
    "seed_rating",
    "FREEZE_PERIOD",
    "display_rank",
    "apply_game_result",
    "is_rank_frozen",
    "games_until_unfrozen",
    "compute_settings",
    "pair_players",
    "handicap_for_difference",
    "komi_for_difference",
    "format_komi",
    "reverse_komi_hint",
    "generate_table",
    "cell_rating_difference",
    "table_position",
    "table_bounds",
]
