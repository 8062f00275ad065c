"""
랭킹 도메인 값 객체

모두 불변(frozen) 데이터클래스 - 계산 함수는 새 객체를 반환하고 입력을 수정하지 않는다.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RankErrorKind(str, Enum):
    """랭킹 계산 오류 유형"""
    INVALID_RANK_FORMAT = "invalid_rank_format"      # 급수 문자열 인식 불가 (기본 급수로 대체)
    INVALID_PLAYER_PAIR = "invalid_player_pair"      # 같은 선수끼리 대국 배정
    NEGATIVE_RATING_GUARD = "negative_rating_guard"  # 점수 0 미만 방지 (0으로 고정)


@dataclass(frozen=True)
class RankError:
    """예외 대신 호출자에게 전달되는 오류 값"""
    kind: RankErrorKind
    message: str
    value: Any = None


@dataclass(frozen=True)
class PlayerRankState:
    """선수별 급수 추적 상태 (profiles 테이블에 저장)"""
    rating_points: int
    last_rank_reached: str
    games_since_last_rank_change: int = 0

    @classmethod
    def from_profile(cls, row: Dict[str, Any]) -> "PlayerRankState":
        """
        profiles 행에서 상태 생성

        두 가지 저장 형태를 모두 허용:
        - games_since_last_rank_change (직접 카운터)
        - total_games_played - games_at_last_rank_change (누적 카운터 2개)
        """
        if row.get("games_since_last_rank_change") is not None:
            counter = int(row["games_since_last_rank_change"])
        else:
            total = int(row.get("total_games_played") or 0)
            at_change = int(row.get("games_at_last_rank_change") or 0)
            counter = total - at_change

        return cls(
            rating_points=max(0, int(row.get("rating_points") or 0)),
            last_rank_reached=row.get("last_rank_reached") or "",
            games_since_last_rank_change=max(0, counter),
        )

    def to_profile_update(self) -> Dict[str, Any]:
        """profiles 업데이트용 딕셔너리 (정규 필드만)"""
        return asdict(self)


@dataclass(frozen=True)
class RankUpdate:
    """대국 결과 반영 후 상태"""
    state: PlayerRankState
    rank_changed: bool
    clamped: bool = False

    @property
    def warning(self) -> Optional[RankError]:
        """점수 하한에 걸린 경우 경고 값"""
        if not self.clamped:
            return None
        return RankError(
            kind=RankErrorKind.NEGATIVE_RATING_GUARD,
            message="점수가 0 미만이 되어 0으로 고정되었습니다",
            value=self.state.rating_points,
        )


@dataclass(frozen=True)
class SeedResult:
    """가입 시 급수 → 초기 점수 변환 결과"""
    rating_points: int
    rank: str
    error: Optional[RankError] = None


@dataclass(frozen=True)
class PlayerRef:
    """대국 배정 입력용 선수 정보"""
    id: str
    name: str
    rating_points: int

    @classmethod
    def from_profile(cls, row: Dict[str, Any]) -> "PlayerRef":
        return cls(
            id=str(row["id"]),
            name=row.get("name", ""),
            rating_points=int(row.get("rating_points") or 0),
        )


@dataclass(frozen=True)
class GameSettings:
    """대국 설정 (저장하지 않음, 요청마다 새로 계산)"""
    black_player: PlayerRef
    white_player: PlayerRef
    rating_difference: int
    handicap_stones: int
    komi: float
    is_nigiri: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PairingResult:
    """대국 배정 결과 - settings 또는 error 중 하나"""
    settings: Optional[GameSettings] = None
    error: Optional[RankError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RatingTableRow:
    """치수/덤 표의 한 행"""
    handicap_stones: int
    komi_values: Tuple[float, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TablePosition:
    """표에서 강조할 칸 위치"""
    handicap_stones: int
    komi_index: int


__all__ = [
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
]
