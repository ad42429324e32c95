"""
backend/tests/test_store_check.py

Purpose:
    Integrity report used by verify.py.
"""

from __future__ import annotations

import pytest

from trainerhub.checks.store_check import StoreHealthCheck


@pytest.mark.asyncio
async def test_fresh_store_is_healthy(store):
    report = await StoreHealthCheck.run(store)

    assert report["status"] == "HEALTHY"
    assert report["steps"] == {"users": "OK", "battles": "OK"}
    assert report["details"] == {"users_count": 0, "battles_count": 0}


@pytest.mark.asyncio
async def test_duplicate_ids_and_bad_turns_are_reported(store):
    await store.write("users", [{"id": "1"}, {"id": "1"}])
    await store.write("battles", [
        {"id": "b1", "player1": "u1", "player2": "u2", "turn": "u3", "status": "active"},
        {"id": "b2", "player1": "u1", "player2": "u2", "turn": "u2", "status": "paused"},
    ])

    report = await StoreHealthCheck.run(store)

    assert report["status"] == "UNHEALTHY"
    assert report["steps"] == {"users": "INVALID", "battles": "INVALID"}
    assert len(report["problems"]) == 3


@pytest.mark.asyncio
async def test_corrupt_collection_fails_its_step(store):
    (store.data_dir / "battles.json").write_text("[{", encoding="utf-8")

    report = await StoreHealthCheck.run(store)

    assert report["steps"]["battles"] == "FAILED"
    assert report["steps"]["users"] == "OK"
    assert report["status"] == "UNHEALTHY"
