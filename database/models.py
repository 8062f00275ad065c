"""
Supabase 테이블 데이터 모델 (Pydantic)
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ranking.models import PlayerRankState, PlayerRef


NOTES_MAX_LENGTH = 10000


class Winner(str, Enum):
    """대국 결과"""
    BLACK = "black"
    WHITE = "white"
    DRAW = "draw"


class PlayerColor(str, Enum):
    """돌 색"""
    BLACK = "black"
    WHITE = "white"


class GameOutcome(str, Enum):
    """선수 입장의 결과 (get_recent_games RPC)"""
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class SaveStatus(str, Enum):
    """급수 상태 저장 결과"""
    SUCCESS = "success"
    CONFLICT = "conflict"   # 읽은 뒤 다른 요청이 먼저 수정함
    ERROR = "error"


class Profile(BaseModel):
    """profiles 테이블 행"""
    id: str = Field(..., description="auth 사용자 ID")
    name: str = Field(..., description="표시 이름")
    rating_points: int = Field(default=0, ge=0, description="점수")
    last_rank_reached: Optional[str] = Field(None, description="마지막 확정 급수")
    games_since_last_rank_change: Optional[int] = Field(None, description="급수 변경 후 대국 수")
    # 구 스키마 (누적 카운터 2개)
    total_games_played: Optional[int] = Field(None, description="총 대국 수")
    games_at_last_rank_change: Optional[int] = Field(None, description="급수 변경 시점의 총 대국 수")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def rank_state(self) -> PlayerRankState:
        return PlayerRankState.from_profile(self.model_dump())

    @property
    def uses_cumulative_counters(self) -> bool:
        """구 스키마 행 (직접 카운터가 비어 있음)"""
        return self.games_since_last_rank_change is None

    def with_rank_state(self, state: PlayerRankState) -> "Profile":
        """state를 저장한 뒤의 행"""
        return self.model_copy(update=state.to_profile_update())

    @property
    def player_ref(self) -> PlayerRef:
        return PlayerRef(id=self.id, name=self.name, rating_points=self.rating_points)


class ProfileCreate(BaseModel):
    """가입 요청 - 자기 신고 급수로 초기 점수 산정"""
    name: str = Field(..., min_length=1, max_length=100)
    rank: str = Field(..., min_length=1, description="자기 신고 급수 (예: 15k, 2d)")

    @field_validator("name", "rank")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("빈 값은 허용되지 않습니다")
        return v


class GameInsert(BaseModel):
    """games 테이블 입력"""
    played_at: Optional[datetime] = None
    black_player_id: str
    white_player_id: str
    winner: Winner
    notes: Optional[str] = None

    class Config:
        use_enum_values = True


class GameCreateResult(BaseModel):
    """대국 기록 결과"""
    success: bool
    game_id: Optional[str] = None
    error: Optional[str] = None


class RecentGame(BaseModel):
    """get_recent_games RPC 반환 행"""
    game_id: str
    played_at: datetime
    opponent_id: str
    opponent_name: str
    player_color: PlayerColor
    result: GameOutcome
    notes: Optional[str] = None
