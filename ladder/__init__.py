"""
Ladder 서비스

대국 기록, 점수 반영, 순위표, 가입
"""
from .games import (
    GameResult,
    RatingUpdateResult,
    GameProcessResult,
    RecordGameResult,
    update_player_rating,
    process_game_result,
    simulate_game_for_player,
    record_game,
    apply_rating_changes,
    ChangeBatch,
)
from .standings import (
    SortField,
    SortDirection,
    ActivityFilter,
    StandingRow,
    build_standings,
)
from .matchmaking import MatchupResult, prepare_game
from .registration import register_profile, rank_choices

__all__ = [
    "GameResult",
    "RatingUpdateResult",
    "GameProcessResult",
    "RecordGameResult",
    "update_player_rating",
    "process_game_result",
    "simulate_game_for_player",
    "record_game",
    "apply_rating_changes",
    "ChangeBatch",
    "SortField",
    "SortDirection",
    "ActivityFilter",
    "StandingRow",
    "build_standings",
    "MatchupResult",
    "prepare_game",
    "register_profile",
    "rank_choices",
]
