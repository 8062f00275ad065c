"""
대국 결과 반영 서비스 테스트
"""

import pytest
from unittest.mock import AsyncMock

from database.models import GameInsert, Profile, ProfileCreate, Winner
from ladder.games import (
    GameResult,
    process_game_result,
    record_game,
    simulate_game_for_player,
    update_player_rating,
)
from ladder.matchmaking import prepare_game
from ladder.registration import rank_choices, register_profile
from ranking.models import RankErrorKind, TablePosition
from tests.conftest import make_db, make_profile


@pytest.mark.asyncio
class TestUpdatePlayerRating:
    """update_player_rating 테스트"""

    async def test_rank_change(self, fake_db, store):
        result = await update_player_rating(fake_db, "p1", 13)
        assert result.success is True
        assert result.rank_changed is True
        assert result.rating_points == 113
        assert store.profiles["p1"]["last_rank_reached"] == "17k"
        assert store.profiles["p1"]["games_since_last_rank_change"] == 0

    async def test_within_band(self, fake_db, store):
        result = await update_player_rating(fake_db, "p1", 1)
        assert result.success is True
        assert result.rank_changed is False
        assert store.profiles["p1"]["games_since_last_rank_change"] == 6

    async def test_player_not_found(self, fake_db, store):
        result = await update_player_rating(fake_db, "nobody", 13)
        assert result.success is False
        assert result.error
        assert store.update_calls == 0

    async def test_retries_on_conflict(self, fake_db, store):
        store.forced_conflicts = 2
        result = await update_player_rating(fake_db, "p1", 13, max_retries=3)
        assert result.success is True
        assert store.update_calls == 3
        assert store.profiles["p1"]["rating_points"] == 113

    async def test_gives_up_after_retries(self, fake_db, store):
        store.forced_conflicts = 10
        result = await update_player_rating(fake_db, "p1", 13, max_retries=3)
        assert result.success is False
        # 첫 시도 + 재시도 3회
        assert store.update_calls == 4
        assert store.profiles["p1"]["rating_points"] == 100

    async def test_zero_retries_means_single_attempt(self, fake_db, store):
        store.forced_conflicts = 1
        result = await update_player_rating(fake_db, "p1", 13, max_retries=0)
        assert result.success is False
        assert store.update_calls == 1
        assert store.profiles["p1"]["rating_points"] == 100

    async def test_save_error(self, fake_db, store):
        store.fail_updates_for = {"p1"}
        result = await update_player_rating(fake_db, "p1", 13)
        assert result.success is False
        assert store.update_calls == 1

    async def test_stale_snapshot_is_rejected(self, fake_db, store):
        """읽은 뒤 다른 요청이 점수를 바꾸면 저장되지 않는다"""
        snapshot = await fake_db.get_profile("p1")
        store.profiles["p1"]["rating_points"] = 120

        status = await fake_db.save_player_rank_state("p1", snapshot.rank_state, expected=snapshot)

        assert status.value == "conflict"
        assert store.profiles["p1"]["rating_points"] == 120

    async def test_rating_floor(self):
        db = make_db([make_profile("p1", 5, "25k")])
        result = await update_player_rating(db, "p1", -13)
        assert result.success is True
        assert db.client.profiles["p1"]["rating_points"] == 0


@pytest.mark.asyncio
class TestCumulativeCounterProfiles:
    """구 스키마 행 (직접 카운터 NULL, 누적 카운터 2개) 저장"""

    async def test_update_succeeds_and_writes_direct_counter(self):
        db = make_db([{
            "id": "p1",
            "name": "Old",
            "rating_points": 100,
            "last_rank_reached": "18k",
            "games_since_last_rank_change": None,
            "total_games_played": 12,
            "games_at_last_rank_change": 9,
        }])

        result = await update_player_rating(db, "p1", 13)

        assert result.success is True
        row = db.client.profiles["p1"]
        assert row["rating_points"] == 113
        # 카운터 3 → 4, 아직 고정 기간
        assert row["games_since_last_rank_change"] == 4
        assert row["last_rank_reached"] == "18k"
        assert db.client.update_calls == 1

    async def test_null_last_rank(self):
        db = make_db([{
            "id": "p1",
            "name": "Old",
            "rating_points": 100,
            "last_rank_reached": None,
            "games_since_last_rank_change": 7,
        }])

        result = await update_player_rating(db, "p1", 13)

        assert result.success is True
        assert db.client.profiles["p1"]["last_rank_reached"] == "17k"

    async def test_concurrent_change_on_cumulative_row_detected(self):
        db = make_db([{
            "id": "p1",
            "name": "Old",
            "rating_points": 100,
            "last_rank_reached": "18k",
            "games_since_last_rank_change": None,
            "total_games_played": 12,
            "games_at_last_rank_change": 9,
        }])
        snapshot = await db.get_profile("p1")
        db.client.profiles["p1"]["total_games_played"] = 13

        status = await db.save_player_rank_state("p1", snapshot.rank_state, expected=snapshot)

        assert status.value == "conflict"
        assert db.client.profiles["p1"]["games_since_last_rank_change"] is None


@pytest.mark.asyncio
class TestProcessGameResult:
    """두 선수 점수 반영 테스트"""

    async def test_player_wins(self, fake_db, store):
        result = await process_game_result(fake_db, GameResult(
            player_id="p1", opponent_id="p2", player_won=True, rating_change=13
        ))
        assert result.success is True
        assert store.profiles["p1"]["rating_points"] == 113
        assert store.profiles["p2"]["rating_points"] == 137
        assert result.player_rank_changed is True

    async def test_player_loses_negative_change_normalized(self, fake_db, store):
        result = await process_game_result(fake_db, GameResult(
            player_id="p1", opponent_id="p2", player_won=False, rating_change=-13
        ))
        assert result.success is True
        assert store.profiles["p1"]["rating_points"] == 87
        assert store.profiles["p2"]["rating_points"] == 163

    async def test_missing_opponent_writes_nothing(self, fake_db, store):
        result = await process_game_result(fake_db, GameResult(
            player_id="p1", opponent_id="ghost", player_won=True, rating_change=13
        ))
        assert result.success is False
        assert "ghost" in result.error
        assert store.profiles["p1"]["rating_points"] == 100
        assert store.update_calls == 0

    async def test_loser_save_error_rolls_back_winner(self, fake_db, store):
        store.fail_updates_for = {"p2"}
        result = await process_game_result(fake_db, GameResult(
            player_id="p1", opponent_id="p2", player_won=True, rating_change=13
        ))
        assert result.success is False
        row = store.profiles["p1"]
        assert row["rating_points"] == 100
        assert row["last_rank_reached"] == "18k"
        assert row["games_since_last_rank_change"] == 5
        assert store.profiles["p2"]["rating_points"] == 150

    async def test_simulate_loss(self, fake_db, store):
        result = await simulate_game_for_player(fake_db, "p2", won=False)
        assert result.success is True
        assert store.profiles["p2"]["rating_points"] == 137


@pytest.mark.asyncio
class TestRecordGame:
    """대국 기록 + 점수 반영 테스트"""

    async def test_black_wins(self, fake_db, store):
        result = await record_game(fake_db, GameInsert(
            black_player_id="p1", white_player_id="p2", winner=Winner.BLACK
        ), rating_change=13)
        assert result.success is True
        assert result.game_id == "1"
        assert store.profiles["p1"]["rating_points"] == 113
        assert store.profiles["p2"]["rating_points"] == 137
        assert result.black_rank_changed is True
        assert len(store.games) == 1

    async def test_white_wins(self, fake_db, store):
        result = await record_game(fake_db, GameInsert(
            black_player_id="p1", white_player_id="p2", winner=Winner.WHITE
        ), rating_change=13)
        assert result.success is True
        assert store.profiles["p1"]["rating_points"] == 87
        assert store.profiles["p2"]["rating_points"] == 163

    async def test_draw_advances_counters_only(self, fake_db, store):
        result = await record_game(fake_db, GameInsert(
            black_player_id="p1", white_player_id="p2", winner=Winner.DRAW
        ))
        assert result.success is True
        assert store.profiles["p1"]["rating_points"] == 100
        assert store.profiles["p2"]["rating_points"] == 150
        assert store.profiles["p1"]["games_since_last_rank_change"] == 6
        assert store.profiles["p2"]["games_since_last_rank_change"] == 6

    async def test_same_player_rejected(self, fake_db, store):
        result = await record_game(fake_db, GameInsert(
            black_player_id="p1", white_player_id="p1", winner=Winner.BLACK
        ))
        assert result.success is False
        assert store.games == []
        assert store.profiles["p1"]["rating_points"] == 100

    async def test_missing_white_player_leaves_no_trace(self):
        db = make_db([make_profile("p1", 100, "18k")])
        result = await record_game(db, GameInsert(
            black_player_id="p1", white_player_id="ghost", winner=Winner.BLACK
        ), rating_change=13)
        assert result.success is False
        assert result.game_id is None
        assert db.client.profiles["p1"]["rating_points"] == 100
        assert db.client.games == []

    async def test_game_insert_failure_rolls_back_ratings(self, fake_db, store):
        store.fail_game_insert = True
        result = await record_game(fake_db, GameInsert(
            black_player_id="p1", white_player_id="p2", winner=Winner.BLACK
        ), rating_change=13)
        assert result.success is False
        assert store.profiles["p1"]["rating_points"] == 100
        assert store.profiles["p1"]["games_since_last_rank_change"] == 5
        assert store.profiles["p2"]["rating_points"] == 150
        assert store.games == []


@pytest.mark.asyncio
class TestPrepareGame:
    """대국 설정 준비 테스트"""

    async def test_self_pairing_rejected(self, fake_db):
        result = await prepare_game(fake_db, "p1", "p1")
        assert result.ok is False
        assert result.pairing.error.kind == RankErrorKind.INVALID_PLAYER_PAIR

    async def test_settings_and_highlight(self, fake_db):
        result = await prepare_game(fake_db, "p2", "p1")
        assert result.ok is True
        settings = result.pairing.settings
        assert settings.black_player.id == "p1"
        assert settings.rating_difference == 50
        assert settings.handicap_stones == 4
        assert settings.komi == -4.5
        assert result.highlight == TablePosition(handicap_stones=4, komi_index=11)

    async def test_equal_players_nigiri(self, fake_db):
        result = await prepare_game(fake_db, "p2", "p3")
        assert result.pairing.settings.is_nigiri is True
        assert result.pairing.settings.black_player.id == "p2"

    async def test_missing_profile(self, fake_db):
        result = await prepare_game(fake_db, "p1", "ghost")
        assert result.ok is False
        assert result.error


@pytest.mark.asyncio
class TestRegistration:
    """가입 테스트"""

    async def test_register_profile(self):
        db = AsyncMock()
        db.create_profile.return_value = Profile(
            id="p9", name="Dan", rating_points=137, last_rank_reached="15k",
            games_since_last_rank_change=5,
        )
        profile = await register_profile(db, "p9", ProfileCreate(name="Dan", rank="15k"))
        assert profile.rating_points == 137
        db.create_profile.assert_awaited_once()

    async def test_register_profile_failure(self):
        db = AsyncMock()
        db.create_profile.return_value = None
        assert await register_profile(db, "p9", ProfileCreate(name="Dan", rank="15k")) is None

    async def test_rank_choices(self):
        choices = rank_choices()
        assert choices[0] == "25k"
        assert choices[-1] == "9d"
        assert len(choices) == 34


class TestProfileCreate:
    """가입 요청 검증"""

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            ProfileCreate(name="   ", rank="15k")

    def test_strips_whitespace(self):
        form = ProfileCreate(name=" Dan ", rank=" 3d ")
        assert form.name == "Dan"
        assert form.rank == "3d"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
