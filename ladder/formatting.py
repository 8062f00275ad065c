"""
표시용 포맷 함수
"""
import math
from datetime import datetime, timezone
from typing import Optional, Union

from database.models import GameOutcome, PlayerColor


def format_game_result(result: Union[GameOutcome, str], player_color: Union[PlayerColor, str]) -> str:
    """'Won as black', 'Lost as white', 'Draw'"""
    result = GameOutcome(result)
    color = PlayerColor(player_color).value

    if result == GameOutcome.DRAW:
        return "Draw"
    if result == GameOutcome.WIN:
        return f"Won as {color}"
    return f"Lost as {color}"


def format_game_date(played_at: datetime, now: Optional[datetime] = None) -> str:
    """
    대국일 상대 표시

    경과 일수(올림) 1 → Today, 2 → Yesterday, 7 이하 → 'N days ago', 그 외 날짜
    """
    now = now or datetime.now(timezone.utc)
    if played_at.tzinfo is None:
        played_at = played_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = abs((now - played_at).total_seconds())
    # 같은 시각이어도 'Today'로 표시
    diff_days = max(1, math.ceil(seconds / 86400))

    if diff_days == 1:
        return "Today"
    if diff_days == 2:
        return "Yesterday"
    if diff_days <= 7:
        return f"{diff_days - 1} days ago"
    return played_at.date().isoformat()
