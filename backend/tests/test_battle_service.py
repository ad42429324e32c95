"""
backend/tests/test_battle_service.py

Purpose:
    Battle lifecycle on top of the JSON store: creation, joining, turn
    ownership for moves, snapshots and active-battle listing.
"""

from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from trainerhub.services import battle_service
from trainerhub.services.battle_service import (
    BattleForbiddenError,
    BattleNotFoundError,
    OutOfTurnError,
    TeamNotFoundError,
)

TEAM_A = {"id": "ta", "name": "Kanto", "members": [{"species": "pikachu"}]}
TEAM_B = {"id": "tb", "name": "Cerulean", "members": [{"species": "starmie"}]}


async def _active_battle(store) -> dict:
    battle = await battle_service.create_battle(store, "u1", "u2", TEAM_A, requester_name="Ash")
    return await battle_service.join_battle(store, battle["id"], "u2", TEAM_B, joiner_name="Misty")


@pytest.mark.asyncio
async def test_create_battle_waits_for_opponent(store):
    battle = await battle_service.create_battle(store, "u1", "u2", TEAM_A, requester_name="Ash")

    assert battle["status"] == "waiting_for_opponent"
    assert battle["turn"] == "u1"
    assert battle["player1"] == "u1"
    assert battle["player2"] == "u2"
    assert battle["player1Team"] == TEAM_A
    assert battle["player2Team"] is None
    assert battle["logs"] == ["Battle created by Ash"]
    assert isinstance(battle["lastUpdate"], int)
    assert await store.find_one("battles", {"id": battle["id"]}) == battle


@pytest.mark.asyncio
async def test_create_battle_allows_missing_team(store):
    battle = await battle_service.create_battle(store, "u1", "ghost", None)

    assert battle["player1Team"] is None
    assert battle["logs"] == ["Battle created by u1"]


@pytest.mark.asyncio
async def test_battle_ids_are_unique(store):
    battles = [await battle_service.create_battle(store, "u1", "u2", TEAM_A) for _ in range(5)]

    assert len({b["id"] for b in battles}) == 5


@pytest.mark.asyncio
async def test_join_activates_battle_and_keeps_turn(store):
    created = await battle_service.create_battle(store, "u1", "u2", TEAM_A, requester_name="Ash")

    joined = await battle_service.join_battle(store, created["id"], "u2", TEAM_B, joiner_name="Misty")

    assert joined["status"] == "active"
    assert joined["player2Team"] == TEAM_B
    assert joined["logs"] == ["Battle created by Ash", "Misty joined the battle!"]
    assert joined["turn"] == "u1"


@pytest.mark.asyncio
async def test_join_by_other_player_is_forbidden_and_changes_nothing(store):
    created = await battle_service.create_battle(store, "u1", "u2", TEAM_A)

    with pytest.raises(BattleForbiddenError):
        await battle_service.join_battle(store, created["id"], "u3", TEAM_B)

    assert await battle_service.get_battle(store, created["id"]) == created


@pytest.mark.asyncio
async def test_join_without_team_fails(store):
    created = await battle_service.create_battle(store, "u1", "u2", TEAM_A)

    with pytest.raises(TeamNotFoundError):
        await battle_service.join_battle(store, created["id"], "u2", None)
    assert (await battle_service.get_battle(store, created["id"]))["status"] == "waiting_for_opponent"


@pytest.mark.asyncio
async def test_join_unknown_battle(store):
    with pytest.raises(BattleNotFoundError):
        await battle_service.join_battle(store, "nope", "u2", TEAM_B)


@pytest.mark.asyncio
async def test_move_flips_turn_and_logs(store):
    battle = await _active_battle(store)

    after = await battle_service.submit_move(store, battle["id"], "u1", "Thunderbolt")

    assert after["turn"] == "u2"
    assert len(after["logs"]) == len(battle["logs"]) + 1
    assert "u1" in after["logs"][-1]
    assert "Thunderbolt" in after["logs"][-1]
    assert after["logs"][:-1] == battle["logs"]
    assert after["lastUpdate"] >= battle["lastUpdate"]

    with pytest.raises(OutOfTurnError):
        await battle_service.submit_move(store, battle["id"], "u1", "Quick Attack")

    back = await battle_service.submit_move(store, battle["id"], "u2", "Water Gun")
    assert back["turn"] == "u1"


@pytest.mark.asyncio
async def test_out_of_turn_move_leaves_battle_unchanged(store):
    battle = await _active_battle(store)

    with pytest.raises(OutOfTurnError):
        await battle_service.submit_move(store, battle["id"], "u2", "Water Gun")

    assert await battle_service.get_battle(store, battle["id"]) == battle


@pytest.mark.asyncio
@pytest.mark.parametrize("move", [None, ""])
async def test_move_defaults_to_attack(store, move):
    battle = await _active_battle(store)

    after = await battle_service.submit_move(store, battle["id"], "u1", move)

    assert after["logs"][-1] == "Player u1 used Attack!"


@pytest.mark.asyncio
async def test_move_is_allowed_before_opponent_joins(store):
    # Only turn ownership is enforced; status is not checked.
    battle = await battle_service.create_battle(store, "u1", "u2", TEAM_A)

    after = await battle_service.submit_move(store, battle["id"], "u1", "Growl")

    assert after["status"] == "waiting_for_opponent"
    assert after["turn"] == "u2"


@pytest.mark.asyncio
async def test_move_on_unknown_battle(store):
    with pytest.raises(BattleNotFoundError):
        await battle_service.submit_move(store, "missing", "u1", "Tackle")


@pytest.mark.asyncio
async def test_concurrent_moves_by_same_player_only_one_lands(store):
    battle = await _active_battle(store)

    results = await asyncio.gather(
        battle_service.submit_move(store, battle["id"], "u1", "Thunderbolt"),
        battle_service.submit_move(store, battle["id"], "u1", "Thunderbolt"),
        return_exceptions=True,
    )

    assert sum(isinstance(r, OutOfTurnError) for r in results) == 1
    final = await battle_service.get_battle(store, battle["id"])
    assert final["turn"] == "u2"
    assert len(final["logs"]) == len(battle["logs"]) + 1


@pytest.mark.asyncio
async def test_team_snapshots_are_independent_of_caller(store):
    team = {"id": "ta", "name": "Kanto", "members": [{"species": "pikachu"}]}
    battle = await battle_service.create_battle(store, "u1", "u2", team)

    team["members"].append({"species": "charmander"})
    team["name"] = "Renamed"

    stored = await battle_service.get_battle(store, battle["id"])
    assert stored["player1Team"] == {"id": "ta", "name": "Kanto", "members": [{"species": "pikachu"}]}


@pytest.mark.asyncio
async def test_create_battle_rejects_malformed_team(store):
    with pytest.raises(ValidationError):
        await battle_service.create_battle(store, "u1", "u2", {"id": "ta", "members": "pikachu"})
    assert await store.read("battles") == []


@pytest.mark.asyncio
async def test_list_active_battles_filters_participants_and_finished(store):
    mine = await battle_service.create_battle(store, "u1", "u2", TEAM_A)
    challenged = await battle_service.create_battle(store, "u3", "u1", TEAM_B)
    await battle_service.create_battle(store, "u2", "u3", TEAM_A)
    done = await battle_service.create_battle(store, "u1", "u3", TEAM_A)
    await store.update("battles", {"id": done["id"]}, {"status": "finished"})

    active = await battle_service.list_active_battles(store, "u1")

    assert [b["id"] for b in active] == [mine["id"], challenged["id"]]


@pytest.mark.asyncio
async def test_get_battle_absent(store):
    assert await battle_service.get_battle(store, "missing") is None
