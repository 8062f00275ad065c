"""
Pytest configuration and fixtures for Zugol tests
"""

import pytest
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set
from unittest.mock import MagicMock
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.supabase_client import ZugolDB


class FakeQuery:
    """PostgREST 쿼리 빌더 대역 - eq / is_ / or_ 필터를 실제 행에 적용"""

    def __init__(self, store: "FakeSupabase", table: str):
        self.store = store
        self.table = table
        self.action = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []

    def select(self, *args, **kwargs):
        return self

    def insert(self, data: Dict[str, Any]):
        self.action = "insert"
        self.payload = data
        return self

    def update(self, data: Dict[str, Any]):
        self.action = "update"
        self.payload = data
        return self

    def eq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column: str, value: str):
        assert value == "null"
        self.filters.append(lambda row: row.get(column) is None)
        return self

    def or_(self, expression: str):
        conditions = []
        for part in expression.split(","):
            column, _, value = part.split(".", 2)
            conditions.append((column, value))
        self.filters.append(lambda row: any(str(row.get(c)) == v for c, v in conditions))
        return self

    def order(self, *args, **kwargs):
        return self

    def limit(self, *args, **kwargs):
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.store.tables.setdefault(self.table, [])
        return [row for row in rows if all(check(row) for check in self.filters)]

    def execute(self):
        if self.action == "insert":
            return MagicMock(data=[self.store.insert_row(self.table, self.payload)])

        matched = self._matching()
        if self.action == "update":
            return MagicMock(data=self.store.update_rows(self.table, matched, self.payload))

        return MagicMock(data=[dict(row) for row in matched])


class FakeRpc:
    def __init__(self, store: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.store = store
        self.name = name
        self.params = params

    def execute(self):
        if self.name == "get_last_game_date":
            last = self.store.last_games.get(self.params["player_id"])
            return MagicMock(data=last.isoformat() if last else None)
        return MagicMock(data=[])


class FakeSupabase:
    """메모리 기반 Supabase 클라이언트 (profiles / games 테이블)"""

    def __init__(self, profiles: List[dict], last_games: Optional[Dict[str, datetime]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "profiles": [dict(p) for p in profiles],
            "games": [],
        }
        self.last_games = last_games or {}
        # 동시 수정 흉내: 남은 횟수만큼 update가 행을 찾지 못함
        self.forced_conflicts = 0
        self.fail_updates_for: Set[str] = set()
        self.fail_game_insert = False
        self.update_calls = 0

    @property
    def profiles(self) -> Dict[str, Dict[str, Any]]:
        return {row["id"]: row for row in self.tables["profiles"]}

    @property
    def games(self) -> List[Dict[str, Any]]:
        return self.tables["games"]

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def insert_row(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        if table == "games" and self.fail_game_insert:
            raise Exception("insert failed")
        row = dict(data)
        row.setdefault("id", str(len(self.tables[table]) + 1))
        self.tables[table].append(row)
        return dict(row)

    def update_rows(self, table: str, rows: List[Dict[str, Any]], data: Dict[str, Any]) -> List[Dict[str, Any]]:
        self.update_calls += 1
        if any(row.get("id") in self.fail_updates_for for row in rows):
            raise Exception("update failed")
        if self.forced_conflicts > 0:
            self.forced_conflicts -= 1
            return []
        for row in rows:
            row.update(data)
        return [dict(row) for row in rows]


def make_profile(player_id: str, rating_points: int, rank: str, counter: int = 5, name: str = None) -> dict:
    return {
        "id": player_id,
        "name": name or player_id,
        "rating_points": rating_points,
        "last_rank_reached": rank,
        "games_since_last_rank_change": counter,
    }


def make_db(profiles: List[dict], last_games: Optional[Dict[str, datetime]] = None) -> ZugolDB:
    return ZugolDB(client=FakeSupabase(profiles, last_games))


@pytest.fixture
def fake_db():
    """선수 3명이 있는 ZugolDB (메모리 Supabase)"""
    return make_db([
        make_profile("p1", 100, "18k", name="Alice"),
        make_profile("p2", 150, "14k", name="Bob"),
        make_profile("p3", 150, "14k", name="Carol"),
    ])


@pytest.fixture
def store(fake_db):
    """fake_db가 사용하는 메모리 Supabase"""
    return fake_db.client


@pytest.fixture
def mock_client():
    """Supabase 쿼리 체인을 흉내내는 MagicMock"""
    client = MagicMock()
    query = MagicMock()
    for method in ["select", "eq", "is_", "insert", "update", "or_", "order", "limit"]:
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[])
    client.table.return_value = query
    client.rpc.return_value = query
    return client
