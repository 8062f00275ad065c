"""
대국 결과 반영 서비스

프로필 스냅샷 조회 → apply_game_result → compare-and-swap 저장.
두 선수는 함께 반영한다. 한 선수 저장이 실패하면 이미 저장한 선수를
스냅샷으로 되돌리고, 충돌이면 최신 스냅샷으로 처음부터 다시 계산한다.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger

from database.models import GameInsert, Profile, SaveStatus, Winner
from database.supabase_client import ZugolDB
from ranking.config import ranking_config
from ranking.hysteresis import apply_game_result
from ranking.models import PlayerRankState


PROFILE_NOT_FOUND = "선수 프로필을 찾을 수 없습니다"
SAVE_FAILED = "선수 프로필 저장 실패"
CONFLICT_EXHAUSTED = "동시 수정 충돌로 저장하지 못했습니다"


@dataclass
class GameResult:
    """두 선수 대국 결과"""
    player_id: str
    opponent_id: str
    player_won: bool
    rating_change: int


@dataclass
class RatingUpdateResult:
    """한 선수 점수 반영 결과"""
    success: bool
    error: Optional[str] = None
    rank_changed: bool = False
    rating_points: Optional[int] = None


@dataclass
class GameProcessResult:
    """두 선수 점수 반영 결과"""
    success: bool
    error: Optional[str] = None
    player_rank_changed: bool = False
    opponent_rank_changed: bool = False


@dataclass
class RecordGameResult:
    """대국 기록 + 점수 반영 결과"""
    success: bool
    game_id: Optional[str] = None
    error: Optional[str] = None
    black_rank_changed: bool = False
    white_rank_changed: bool = False


@dataclass
class AppliedChange:
    """저장된 한 선수의 변경 (되돌리기용 스냅샷 포함)"""
    player_id: str
    before: Profile
    after: PlayerRankState
    rank_changed: bool


@dataclass
class ChangeBatch:
    """여러 선수 변경 결과 - 전부 저장되었거나 아무것도 저장되지 않음"""
    success: bool
    changes: List[AppliedChange]
    error: Optional[str] = None


# ==================== 저장 / 되돌리기 ====================

async def rollback_changes(db: ZugolDB, changes: List[AppliedChange]) -> bool:
    """저장한 변경을 역순으로 원래 스냅샷으로 되돌림"""
    restored = True
    for change in reversed(changes):
        status = await db.save_player_rank_state(
            change.player_id,
            change.before.rank_state,
            expected=change.before.with_rank_state(change.after),
        )
        if status != SaveStatus.SUCCESS:
            logger.error(f"점수 되돌리기 실패 ({change.player_id}): {status}")
            restored = False
    return restored


async def apply_rating_changes(
    db: ZugolDB,
    deltas: List[Tuple[str, int]],
    max_retries: Optional[int] = None,
) -> ChangeBatch:
    """
    (선수 ID, 점수 변동) 목록을 함께 반영

    모든 프로필을 읽고 새 상태를 계산한 뒤에 저장을 시작한다.
    중간에 실패하면 앞서 저장한 선수를 되돌린다.
    """
    retries = ranking_config.max_save_retries if max_retries is None else max_retries
    attempts = max(0, retries) + 1

    for attempt in range(1, attempts + 1):
        pending = []
        for player_id, delta in deltas:
            profile = await db.get_profile(player_id)
            if profile is None:
                return ChangeBatch(success=False, changes=[], error=f"{PROFILE_NOT_FOUND}: {player_id}")

            update = apply_game_result(profile.rank_state, delta, ranking_config.freeze_period)
            if update.warning:
                logger.debug(f"{player_id}: {update.warning.message}")
            pending.append(AppliedChange(player_id, profile, update.state, update.rank_changed))

        saved: List[AppliedChange] = []
        status = SaveStatus.SUCCESS
        for change in pending:
            status = await db.save_player_rank_state(change.player_id, change.after, expected=change.before)
            if status != SaveStatus.SUCCESS:
                break
            saved.append(change)

        if status == SaveStatus.SUCCESS:
            for change in saved:
                if change.rank_changed:
                    logger.info(
                        f"급수 변경: {change.player_id} {change.before.rank_state.last_rank_reached} → "
                        f"{change.after.last_rank_reached}"
                    )
            return ChangeBatch(success=True, changes=saved)

        await rollback_changes(db, saved)

        if status == SaveStatus.ERROR:
            return ChangeBatch(success=False, changes=[], error=SAVE_FAILED)

        logger.info(f"충돌 재시도 {attempt}/{attempts}: {[player_id for player_id, _ in deltas]}")

    return ChangeBatch(success=False, changes=[], error=CONFLICT_EXHAUSTED)


# ==================== 대국 결과 ====================

async def update_player_rating(
    db: ZugolDB,
    player_id: str,
    rating_change: int,
    max_retries: Optional[int] = None,
) -> RatingUpdateResult:
    """선수 한 명의 점수 변동 반영"""
    batch = await apply_rating_changes(db, [(player_id, rating_change)], max_retries)
    if not batch.success:
        return RatingUpdateResult(success=False, error=batch.error)

    change = batch.changes[0]
    return RatingUpdateResult(
        success=True,
        rank_changed=change.rank_changed,
        rating_points=change.after.rating_points,
    )


async def process_game_result(db: ZugolDB, result: GameResult) -> GameProcessResult:
    """승자 +|변동|, 패자 -|변동| (둘 다 반영되거나 둘 다 반영되지 않음)"""
    change = abs(result.rating_change)
    batch = await apply_rating_changes(db, [
        (result.player_id, change if result.player_won else -change),
        (result.opponent_id, -change if result.player_won else change),
    ])
    if not batch.success:
        return GameProcessResult(success=False, error=batch.error)

    player, opponent = batch.changes
    return GameProcessResult(
        success=True,
        player_rank_changed=player.rank_changed,
        opponent_rank_changed=opponent.rank_changed,
    )


async def simulate_game_for_player(
    db: ZugolDB,
    player_id: str,
    won: bool,
    rating_change: int = 13,
) -> RatingUpdateResult:
    """테스트용 - 한 선수에게만 승/패 적용"""
    change = rating_change if won else -rating_change
    return await update_player_rating(db, player_id, change)


async def record_game(
    db: ZugolDB,
    game: GameInsert,
    rating_change: Optional[int] = None,
) -> RecordGameResult:
    """
    두 선수 점수 반영 후 대국 기록 저장

    무승부는 두 선수 모두 변동 0으로 반영 (고정 기간 카운터는 증가).
    대국 저장에 실패하면 점수 반영을 되돌린다.
    """
    if game.black_player_id == game.white_player_id:
        return RecordGameResult(success=False, error="흑과 백은 서로 다른 선수여야 합니다")

    change = abs(ranking_config.rating_change_per_game if rating_change is None else rating_change)

    if game.winner == Winner.DRAW:
        black_delta, white_delta = 0, 0
    elif game.winner == Winner.BLACK:
        black_delta, white_delta = change, -change
    else:
        black_delta, white_delta = -change, change

    batch = await apply_rating_changes(db, [
        (game.black_player_id, black_delta),
        (game.white_player_id, white_delta),
    ])
    if not batch.success:
        return RecordGameResult(success=False, error=batch.error)

    created = await db.create_game(game)
    if not created.success:
        if not await rollback_changes(db, batch.changes):
            logger.error(f"대국 저장 실패 후 점수 되돌리기 실패: {game.black_player_id}, {game.white_player_id}")
        return RecordGameResult(success=False, error=created.error)

    black, white = batch.changes
    return RecordGameResult(
        success=True,
        game_id=created.game_id,
        black_rank_changed=black.rank_changed,
        white_rank_changed=white.rank_changed,
    )
