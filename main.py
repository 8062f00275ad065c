"""
Zugol 바둑 리그 - 명령줄 도구
"""
import asyncio
import argparse
import sys
from typing import List, Optional

from loguru import logger

from ranking.config import KomiPolicy, ranking_config
from ranking.hysteresis import apply_game_result, display_rank
from ranking.models import PlayerRankState, PlayerRef
from ranking.pairing import compute_settings, format_komi, reverse_komi_hint
from ranking.rank import rating_to_rank, seed_rating
from ranking.table import cell_rating_difference, generate_table, table_position


def setup_logging(level: str = "INFO"):
    """로깅 설정"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level
    )
    logger.add(
        "logs/zugol_{time:YYYY-MM-DD}.log",
        rotation="1 day",
        retention="30 days",
        level="DEBUG"
    )


def render_table(highlight: Optional[int], policy: KomiPolicy) -> str:
    """치수/덤 기준표 텍스트 출력 (강조 칸은 [ ])"""
    position = table_position(highlight, policy) if highlight is not None else None
    lines = []

    for row_index, row in enumerate(generate_table()):
        cells = []
        for col_index in range(len(row.komi_values)):
            diff = cell_rating_difference(row_index, col_index)
            marked = (
                position is not None
                and position.handicap_stones == row.handicap_stones
                and position.komi_index == col_index
            )
            cells.append(f"[{diff:>3}]" if marked else f" {diff:>3} ")
        lines.append("".join(cells) + f" | {row.handicap_stones}")

    komi_cells = "".join(f"{format_komi(k):>5}" for k in generate_table()[0].komi_values)
    lines.append(komi_cells + " | komi")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Zugol 바둑 리그 랭킹 도구")
    parser.add_argument("--log-level", default="INFO", help="로그 레벨")
    sub = parser.add_subparsers(dest="command", required=True)

    p_rank = sub.add_parser("rank", help="점수 → 급수")
    p_rank.add_argument("points", type=int)

    p_seed = sub.add_parser("seed", help="가입 급수 → 초기 점수")
    p_seed.add_argument("rank")

    p_pair = sub.add_parser("pair", help="두 선수 점수로 대국 설정")
    p_pair.add_argument("a", type=int, help="선수 A 점수")
    p_pair.add_argument("b", type=int, help="선수 B 점수")

    p_table = sub.add_parser("table", help="치수/덤 기준표")
    p_table.add_argument("--highlight", type=int, help="강조할 점수 차이")

    p_sim = sub.add_parser("simulate", help="급수 히스테리시스 시뮬레이션")
    p_sim.add_argument("--points", type=int, default=0)
    p_sim.add_argument("--counter", type=int, default=ranking_config.freeze_period)
    p_sim.add_argument("--rank", default=None, help="마지막 확정 급수 (기본: 점수 기준)")
    p_sim.add_argument("--delta", type=int, default=ranking_config.rating_change_per_game)
    p_sim.add_argument("--games", type=int, default=5)

    p_standings = sub.add_parser("standings", help="순위표 (Supabase 필요)")
    p_standings.add_argument("--sort", default="rating_points",
                             choices=["name", "rating_points", "last_game_played"])
    p_standings.add_argument("--direction", default="desc", choices=["asc", "desc"])
    p_standings.add_argument("--activity", default="6months",
                             choices=["all", "1month", "3months", "6months", "1year"])

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    args = build_parser().parse_args(argv)
    policy = ranking_config.komi_policy

    if args.command == "rank":
        print(rating_to_rank(args.points))

    elif args.command == "seed":
        seed = seed_rating(args.rank, default_rank=ranking_config.default_rank)
        print(f"{seed.rank}: {seed.rating_points}")
        if seed.error:
            return 1

    elif args.command == "pair":
        settings = compute_settings(PlayerRef("A", "A", args.a), PlayerRef("B", "B", args.b), policy)
        print(f"Black: {settings.black_player.name} ({settings.black_player.rating_points} pts)")
        print(f"White: {settings.white_player.name} ({settings.white_player.rating_points} pts)")
        print(f"Difference: {settings.rating_difference} pts")
        print(f"Handicap: {settings.handicap_stones}")
        print(f"Komi: {format_komi(settings.komi)}")
        if settings.is_nigiri:
            print("Nigiri")
        hint = reverse_komi_hint(settings)
        if hint:
            print(hint)

    elif args.command == "table":
        print(render_table(args.highlight, policy))

    elif args.command == "simulate":
        freeze = ranking_config.freeze_period
        state = PlayerRankState(
            rating_points=max(0, args.points),
            last_rank_reached=args.rank or rating_to_rank(args.points),
            games_since_last_rank_change=max(0, args.counter),
        )
        for game in range(1, args.games + 1):
            update = apply_game_result(state, args.delta, freeze)
            state = update.state
            changed = " (rank changed)" if update.rank_changed else ""
            print(f"{game}: {state.rating_points} pts {display_rank(state, freeze)}{changed}")

    elif args.command == "standings":
        from database.supabase_client import ZugolDB
        from ladder.formatting import format_game_date
        from ladder.standings import build_standings

        try:
            db = ZugolDB()
        except ValueError as e:
            logger.error(str(e))
            return 1

        rows = await build_standings(db, args.sort, args.direction, args.activity)
        print("\n=== Ladder ===")
        for row in rows:
            last = format_game_date(row.last_game_date) if row.last_game_date else "-"
            print(f"{row.position:>3} {row.profile.name:<20} {row.profile.rating_points:>4} pts ({row.display_rank}) {last}")

    return 0


def run():
    args = build_parser().parse_args()
    setup_logging(args.log_level)
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    run()
