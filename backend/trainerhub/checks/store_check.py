"""
backend/trainerhub/checks/store_check.py

Purpose:
    Self-check for the JSON collection store. Verifies that every registered
    collection file exists, parses as an array of objects and holds no
    duplicate ids, and that battles respect the turn-ownership invariant.

Dependencies:
    - trainerhub.database
"""

import logging
from collections import Counter

from trainerhub.database import CorruptDataError, JSONStore

logger = logging.getLogger("trainerhub.store_check")

BATTLE_STATUSES = {"waiting_for_opponent", "active", "finished"}


class StoreHealthCheck:
    """Integrity report over all collections of a store."""

    @staticmethod
    async def run(store: JSONStore) -> dict:
        report: dict = {
            "status": "UNKNOWN",
            "steps": {name: "PENDING" for name in store.files},
            "details": {},
            "problems": [],
        }

        for name in store.files:
            try:
                items = await store.read(name)
            except (CorruptDataError, FileNotFoundError) as exc:
                report["steps"][name] = "FAILED"
                report["problems"].append(str(exc))
                continue

            problems = _collection_problems(name, items)
            report["steps"][name] = "OK" if not problems else "INVALID"
            report["details"][f"{name}_count"] = len(items)
            report["problems"].extend(problems)

        report["status"] = "HEALTHY" if not report["problems"] else "UNHEALTHY"
        if report["problems"]:
            logger.warning("Store check found %d problem(s)", len(report["problems"]))
        return report


def _collection_problems(name: str, items: list) -> list[str]:
    problems: list[str] = []
    if not all(isinstance(doc, dict) for doc in items):
        problems.append(f"{name}: contains non-object entries")
        return problems

    counts = Counter(doc.get("id") for doc in items if doc.get("id") is not None)
    for doc_id, count in counts.items():
        if count > 1:
            problems.append(f"{name}: id {doc_id} appears {count} times")

    if name == "battles":
        for battle in items:
            if battle.get("turn") not in (battle.get("player1"), battle.get("player2")):
                problems.append(f"battles: {battle.get('id')} has turn outside its players")
            if battle.get("status") not in BATTLE_STATUSES:
                problems.append(f"battles: {battle.get('id')} has unknown status {battle.get('status')!r}")
    return problems
