"""
대국 상대 선택 → 대국 설정
"""
from dataclasses import dataclass
from typing import Optional

from database.supabase_client import ZugolDB
from ranking.config import ranking_config
from ranking.models import PairingResult, RankError, RankErrorKind, TablePosition
from ranking.pairing import pair_players
from ranking.table import table_position


@dataclass
class MatchupResult:
    """대국 설정과 기준표 강조 위치"""
    pairing: Optional[PairingResult] = None
    highlight: Optional[TablePosition] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.pairing is not None and self.pairing.ok


async def prepare_game(db: ZugolDB, player_id: str, opponent_id: str) -> MatchupResult:
    """두 선수 프로필로 흑백/치석/덤 계산"""
    if player_id == opponent_id:
        return MatchupResult(pairing=PairingResult(error=RankError(
            kind=RankErrorKind.INVALID_PLAYER_PAIR,
            message="같은 선수끼리는 대국을 배정할 수 없습니다",
            value=player_id,
        )))

    player = await db.get_profile(player_id)
    opponent = await db.get_profile(opponent_id)
    if player is None or opponent is None:
        return MatchupResult(error="선수 프로필을 찾을 수 없습니다")

    policy = ranking_config.komi_policy
    pairing = pair_players(player.player_ref, opponent.player_ref, policy)
    if not pairing.ok:
        return MatchupResult(pairing=pairing)

    return MatchupResult(
        pairing=pairing,
        highlight=table_position(pairing.settings.rating_difference, policy),
    )
