"""
순위표 (ladder standings)

- 활동 기간 필터: 전체 / 1개월 / 3개월 / 6개월 / 1년
- 정렬: 이름, 점수, 마지막 대국일
- 순위: 대국 기록이 있는 선수 우선, 그다음 점수 내림차순
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from database.models import Profile
from database.supabase_client import ZugolDB
from ranking.config import ranking_config
from ranking.hysteresis import display_rank


class SortField(str, Enum):
    NAME = "name"
    RATING_POINTS = "rating_points"
    LAST_GAME_PLAYED = "last_game_played"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ActivityFilter(str, Enum):
    ALL = "all"
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"


# 활동 기간 (달력 기준 개월 수)
ACTIVITY_WINDOW_MONTHS = {
    ActivityFilter.ONE_MONTH: 1,
    ActivityFilter.THREE_MONTHS: 3,
    ActivityFilter.SIX_MONTHS: 6,
    ActivityFilter.ONE_YEAR: 12,
}

ACTIVITY_LABELS = {
    ActivityFilter.ALL: "All players",
    ActivityFilter.ONE_MONTH: "Active in last month",
    ActivityFilter.THREE_MONTHS: "Active in last 3 months",
    ActivityFilter.SIX_MONTHS: "Active in last 6 months",
    ActivityFilter.ONE_YEAR: "Active in last year",
}


@dataclass
class StandingRow:
    """순위표 한 줄"""
    position: int
    profile: Profile
    display_rank: str
    last_game_date: Optional[datetime] = None

    @property
    def has_games(self) -> bool:
        return self.last_game_date is not None


def months_before(now: datetime, months: int) -> datetime:
    """
    now에서 달력 기준 months개월 전 날짜의 0시

    해당 달에 같은 날이 없으면 넘치는 일수만큼 다음 달로 넘어간다 (3/31 - 1개월 → 3/3).
    """
    year, month_index = divmod(now.year * 12 + now.month - 1 - months, 12)
    first_day = now.replace(year=year, month=month_index + 1, day=1,
                            hour=0, minute=0, second=0, microsecond=0)
    return first_day + timedelta(days=now.day - 1)


def activity_cutoff(activity: ActivityFilter, now: Optional[datetime] = None) -> Optional[datetime]:
    """필터 기준 시각 (ALL이면 None)"""
    months = ACTIVITY_WINDOW_MONTHS.get(ActivityFilter(activity))
    if months is None:
        return None
    now = now or datetime.now(timezone.utc)
    return months_before(now, months)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filter_by_activity(
    profiles: List[Profile],
    last_game_dates: Dict[str, Optional[datetime]],
    activity: ActivityFilter,
    now: Optional[datetime] = None,
) -> List[Profile]:
    """기간 내 대국 기록이 있는 선수만 (대국 기록 없는 선수는 제외)"""
    cutoff = activity_cutoff(activity, now)
    if cutoff is None:
        return list(profiles)

    cutoff = _as_utc(cutoff)
    filtered = []
    for profile in profiles:
        last_game = last_game_dates.get(profile.id)
        if last_game and _as_utc(last_game) >= cutoff:
            filtered.append(profile)
    return filtered


def ladder_positions(
    profiles: List[Profile],
    last_game_dates: Dict[str, Optional[datetime]],
) -> Dict[str, int]:
    """전체 선수 순위 (1부터) - 대국 기록이 있는 선수 우선, 점수 내림차순"""
    ordered = sorted(
        profiles,
        key=lambda p: (last_game_dates.get(p.id) is None, -p.rating_points),
    )
    return {profile.id: index for index, profile in enumerate(ordered, 1)}


def sort_standings(
    rows: List[StandingRow],
    sort_field: SortField = SortField.RATING_POINTS,
    direction: SortDirection = SortDirection.DESC,
) -> List[StandingRow]:
    """
    순위표 정렬

    점수 정렬: 방향과 관계없이 대국 기록이 있는 선수가 먼저.
    마지막 대국일 정렬: 대국 기록이 없는 선수는 항상 마지막.
    """
    reverse = SortDirection(direction) == SortDirection.DESC
    sort_field = SortField(sort_field)

    if sort_field == SortField.NAME:
        return sorted(rows, key=lambda r: r.profile.name.lower(), reverse=reverse)

    with_games = [r for r in rows if r.has_games]
    without_games = [r for r in rows if not r.has_games]

    if sort_field == SortField.RATING_POINTS:
        key = lambda r: r.profile.rating_points
        return sorted(with_games, key=key, reverse=reverse) + sorted(without_games, key=key, reverse=reverse)

    return sorted(with_games, key=lambda r: _as_utc(r.last_game_date), reverse=reverse) + without_games


async def fetch_last_game_dates(db: ZugolDB, profiles: List[Profile]) -> Dict[str, Optional[datetime]]:
    """모든 선수의 마지막 대국일 병렬 조회"""
    dates = await asyncio.gather(*(db.get_last_game_date(p.id) for p in profiles))
    return {profile.id: last for profile, last in zip(profiles, dates)}


async def build_standings(
    db: ZugolDB,
    sort_field: SortField = SortField.RATING_POINTS,
    direction: SortDirection = SortDirection.DESC,
    activity: ActivityFilter = ActivityFilter.SIX_MONTHS,
    now: Optional[datetime] = None,
) -> List[StandingRow]:
    """순위표 생성"""
    profiles = await db.list_players()
    last_game_dates = await fetch_last_game_dates(db, profiles)

    positions = ladder_positions(profiles, last_game_dates)
    visible = filter_by_activity(profiles, last_game_dates, activity, now)
    rows = [
        StandingRow(
            position=positions[profile.id],
            profile=profile,
            display_rank=display_rank(profile.rank_state, ranking_config.freeze_period),
            last_game_date=last_game_dates.get(profile.id),
        )
        for profile in visible
    ]

    logger.info(f"순위표: {len(rows)}/{len(profiles)}명 ({ACTIVITY_LABELS[ActivityFilter(activity)]})")
    return sort_standings(rows, sort_field, direction)
