"""
Supabase 데이터베이스 클라이언트

profiles / games 테이블과 get_recent_games, get_last_game_date RPC 접근.
오류는 로그로 남기고 None / False / SaveStatus.ERROR 로 반환한다.
"""
import re
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from supabase import create_client, Client
from loguru import logger

from ranking.config import supabase_config, ranking_config
from ranking.models import PlayerRankState
from ranking.rank import seed_rating
from .models import (
    NOTES_MAX_LENGTH,
    GameCreateResult,
    GameInsert,
    Profile,
    ProfileCreate,
    RecentGame,
    SaveStatus,
)


# 싱글톤 클라이언트
_supabase_client: Optional[Client] = None

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")


def get_supabase_client() -> Client:
    """Supabase 클라이언트 인스턴스 반환 (싱글톤)"""
    global _supabase_client
    if _supabase_client is None:
        if not supabase_config.supabase_url or not supabase_config.supabase_key:
            raise ValueError("SUPABASE_URL과 SUPABASE_KEY 환경변수를 설정해주세요")
        _supabase_client = create_client(
            supabase_config.supabase_url,
            supabase_config.supabase_key
        )
    return _supabase_client


def sanitize_notes(notes: str) -> str:
    """메모에서 script 블록과 HTML 태그 제거, 길이 제한"""
    cleaned = _SCRIPT_RE.sub("", notes)
    cleaned = _TAG_RE.sub("", cleaned)
    return cleaned.strip()[:NOTES_MAX_LENGTH]


class ZugolDB:
    """Supabase 데이터베이스 클라이언트"""

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or get_supabase_client()

    # ==================== 프로필 관련 ====================

    async def get_profile(self, player_id: str) -> Optional[Profile]:
        """ID로 프로필 조회"""
        try:
            result = self.client.table("profiles").select("*").eq(
                "id", player_id
            ).execute()

            if result.data:
                return Profile(**result.data[0])
            return None
        except Exception as e:
            logger.error(f"프로필 조회 오류 ({player_id}): {e}")
            return None

    async def get_player_rank_state(self, player_id: str) -> Optional[PlayerRankState]:
        """급수 추적 상태 조회 (없으면 None)"""
        profile = await self.get_profile(player_id)
        if profile is None:
            return None
        return profile.rank_state

    async def save_player_rank_state(
        self,
        player_id: str,
        new_state: PlayerRankState,
        expected: Profile,
    ) -> SaveStatus:
        """
        급수 상태 저장 (compare-and-swap)

        expected(읽어 온 행)의 저장 값과 현재 행이 일치할 때만 갱신한다.
        NULL 컬럼은 is null로 비교하고, 구 스키마 행은 누적 카운터 2개로 비교한다.
        항상 직접 카운터를 기록하므로 구 스키마 행은 저장 시 새 형태로 바뀐다.
        갱신된 행이 없으면 다른 요청이 먼저 수정한 것 → CONFLICT.
        """
        data = {
            **new_state.to_profile_update(),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        columns = ["rating_points", "last_rank_reached", "games_since_last_rank_change"]
        if expected.uses_cumulative_counters:
            columns += ["total_games_played", "games_at_last_rank_change"]

        try:
            query = self.client.table("profiles").update(data).eq("id", player_id)
            for column in columns:
                value = getattr(expected, column)
                if value is None:
                    query = query.is_(column, "null")
                else:
                    query = query.eq(column, value)
            result = query.execute()

            if result.data:
                return SaveStatus.SUCCESS

            logger.warning(f"프로필 동시 수정 충돌: {player_id}")
            return SaveStatus.CONFLICT
        except Exception as e:
            logger.error(f"프로필 저장 오류 ({player_id}): {e}")
            return SaveStatus.ERROR

    async def list_players(self) -> List[Profile]:
        """전체 프로필 목록 (순위표/대국 상대 선택용)"""
        try:
            result = self.client.table("profiles").select("*").execute()
            return [Profile(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"프로필 목록 조회 오류: {e}")
            return []

    async def create_profile(self, player_id: str, form: ProfileCreate) -> Optional[Profile]:
        """가입 급수로 점수를 산정해 프로필 생성"""
        seed = seed_rating(form.rank, default_rank=ranking_config.default_rank)

        data = {
            "id": player_id,
            "name": form.name,
            "rating_points": seed.rating_points,
            "last_rank_reached": seed.rank,
            # 신규 가입자는 고정 기간 없이 바로 점수 기준 급수 표시
            "games_since_last_rank_change": ranking_config.freeze_period,
        }

        try:
            result = self.client.table("profiles").insert(data).execute()
            if result.data:
                return Profile(**result.data[0])
            return None
        except Exception as e:
            logger.error(f"프로필 생성 오류 ({player_id}): {e}")
            return None

    # ==================== 대국 관련 ====================

    async def create_game(self, game: GameInsert) -> GameCreateResult:
        """대국 기록 저장"""
        if game.black_player_id == game.white_player_id:
            return GameCreateResult(success=False, error="흑과 백은 서로 다른 선수여야 합니다")

        data: Dict[str, Any] = {
            "black_player_id": game.black_player_id,
            "white_player_id": game.white_player_id,
            "winner": game.winner,
            "notes": sanitize_notes(game.notes) if game.notes else None,
        }
        if game.played_at:
            data["played_at"] = game.played_at.isoformat()

        try:
            result = self.client.table("games").insert(data).execute()
            if result.data:
                return GameCreateResult(success=True, game_id=str(result.data[0].get("id")))
            return GameCreateResult(success=False, error="대국 기록 저장 실패")
        except Exception as e:
            logger.error(f"대국 저장 오류: {e}")
            return GameCreateResult(success=False, error="대국 기록 저장 실패")

    async def get_recent_games(self, player_id: str, limit: Optional[int] = None) -> List[RecentGame]:
        """선수의 최근 대국 (get_recent_games RPC)"""
        try:
            result = self.client.rpc("get_recent_games", {
                "player_id": player_id,
                "game_limit": limit or ranking_config.recent_games_limit,
            }).execute()
            return [RecentGame(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"최근 대국 조회 오류 ({player_id}): {e}")
            return []

    async def get_last_game_date(self, player_id: str) -> Optional[datetime]:
        """선수의 마지막 대국 일시 (get_last_game_date RPC)"""
        try:
            result = self.client.rpc("get_last_game_date", {
                "player_id": player_id,
            }).execute()

            value = result.data
            if isinstance(value, list):
                value = value[0] if value else None
            if not value:
                return None
            if isinstance(value, datetime):
                return value
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except Exception as e:
            logger.error(f"마지막 대국일 조회 오류 ({player_id}): {e}")
            return None

    async def get_player_games(self, player_id: str) -> List[Dict[str, Any]]:
        """선수의 전체 대국 (최신순)"""
        try:
            result = self.client.table("games").select(
                "*, black_player:profiles!black_player_id(id, name), "
                "white_player:profiles!white_player_id(id, name)"
            ).or_(
                f"black_player_id.eq.{player_id},white_player_id.eq.{player_id}"
            ).order(
                "played_at", desc=True
            ).order(
                "created_at", desc=True
            ).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"대국 목록 조회 오류 ({player_id}): {e}")
            return []
