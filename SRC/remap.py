"""Remap planning.

Compare key ownership between two ring states. Reports only; no data is moved.
"""
from __future__ import annotations

from typing import Dict, Hashable, Iterable, Optional, Tuple
from collections import Counter

from consistent_hash_ring import ConsistentHasher

Plan = Dict[str, Tuple[Hashable, Hashable]]


class RemapPlanner:
    def plan_moved(self, keys: Iterable[str], ring_before: ConsistentHasher, ring_after: ConsistentHasher) -> Plan:
        """Return dict key -> (from_node, to_node) for keys whose owner changed.

        Owners are the RingNode values themselves, compared by equality.
        """
        owners = ((k, ring_before.get_node(k), ring_after.get_node(k)) for k in keys)
        return {k: (old, new) for k, old, new in owners if old != new}

    def stats(self, plan: Plan, total_keys: Optional[int] = None) -> Dict[str, object]:
        by_to = Counter(to for (_, to) in plan.values())
        by_from = Counter(frm for (frm, _) in plan.values())
        out: Dict[str, object] = {
            "moved_count": len(plan),
            "by_to": dict(by_to),
            "by_from": dict(by_from),
        }
        if total_keys:
            out["moved_fraction"] = len(plan) / total_keys
        return out
