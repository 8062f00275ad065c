"""
랭킹/대국 설정
"""
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class KomiPolicy(str, Enum):
    """표 범위(치수 9점, 차이 116) 밖의 덤 처리 방식"""
    UNBOUNDED = "unbounded"  # 1점 차이마다 덤 1집씩 계속 감소
    CYCLIC = "cyclic"        # 13점마다 +6.5로 되돌아감


class RankingConfig(BaseSettings):
    """랭킹 계산 설정"""

    freeze_period: int = Field(default=5, ge=1, description="급수 변경 후 고정 대국 수")
    komi_policy: KomiPolicy = Field(default=KomiPolicy.UNBOUNDED, description="표 밖 덤 정책")
    default_rank: str = Field(default="15k", description="인식 불가 급수 입력 시 기본값")
    rating_change_per_game: int = Field(default=13, ge=0, description="대국당 점수 변동")
    max_save_retries: int = Field(default=3, ge=0, description="동시 수정 충돌 시 재시도 횟수 (첫 시도 제외)")
    recent_games_limit: int = Field(default=5, ge=1, description="최근 대국 조회 개수")

    class Config:
        env_prefix = "ZUGOL_"
        case_sensitive = False


class SupabaseConfig(BaseSettings):
    """Supabase 설정"""

    supabase_url: str = Field(default="", description="Supabase Project URL")
    supabase_key: str = Field(default="", description="Supabase anon key")

    class Config:
        env_prefix = ""
        case_sensitive = False


# 전역 설정 인스턴스
ranking_config = RankingConfig()
supabase_config = SupabaseConfig()
