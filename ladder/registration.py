"""
가입 시 프로필 생성
"""
from typing import Optional

from loguru import logger

from database.models import Profile, ProfileCreate
from database.supabase_client import ZugolDB
from ranking.rank import RANK_LABELS


def rank_choices() -> list[str]:
    """가입 양식의 급수 선택지 (약한 순)"""
    return list(RANK_LABELS)


async def register_profile(db: ZugolDB, player_id: str, form: ProfileCreate) -> Optional[Profile]:
    """인증 사용자 ID로 프로필 생성 - 인식 불가 급수는 기본 급수로 대체"""
    profile = await db.create_profile(player_id, form)
    if profile is None:
        logger.error(f"프로필 생성 실패: {player_id}")
        return None

    logger.info(f"신규 선수 등록: {profile.name} ({profile.last_rank_reached}, {profile.rating_points}점)")
    return profile
