"""Consistent hashing ring with weighted virtual nodes.
- Sorted position list for O(log N) lookups via bisect
- weight * replica_count virtual positions per node
- Reader/writer lock: lookups share, membership changes are exclusive
"""
from __future__ import annotations

from typing import Dict, Hashable, List, Optional, Tuple, Union
import bisect
import logging

from hashing import HashFunction, get_hash_function, hash_name
from ring_config import get_settings
from ring_node import RingNode
from rwlock import ReadWriteLock

log = logging.getLogger(__name__)


class EmptyRingError(LookupError):
    """Raised when a key is looked up before any node was added."""

    def __init__(self, key: Optional[str] = None):
        msg = "no nodes available"
        if key is not None:
            msg = f"{msg} for key {key!r}"
        super().__init__(msg)
        self.key = key


class ConsistentHasher:
    """Consistent hashing ring mapping string keys to weighted nodes."""

    def __init__(self, replica_count: int = 100, hash_function: Union[str, HashFunction] = "crc32"):
        if isinstance(replica_count, bool) or not isinstance(replica_count, int) or replica_count < 1:
            raise ValueError(f"replica_count must be a positive integer, got {replica_count!r}")
        self._replica_count = replica_count
        self._hash = get_hash_function(hash_function)
        self._lock = ReadWriteLock()
        self._sorted_tokens: List[int] = []
        self._owners: Dict[int, RingNode] = {}
        # node -> positions it claimed, in insertion order
        self._nodes: Dict[Hashable, List[int]] = {}
        self._collisions = 0

    @classmethod
    def from_settings(cls, settings=None) -> "ConsistentHasher":
        if settings is None:
            settings = get_settings()
        return cls(replica_count=settings.replica_count, hash_function=settings.hash_function)

    @property
    def replica_count(self) -> int:
        return self._replica_count

    def _vn_count(self, node: RingNode) -> int:
        return node.weight * self._replica_count

    def add_node(self, node: RingNode) -> None:
        if not isinstance(node, RingNode) or isinstance(node.weight, bool) or not isinstance(node.weight, int):
            raise TypeError(f"{type(node).__name__} does not provide weight and replica_key()")
        if node.weight <= 0:
            log.warning("ignoring node=%r with non-positive weight=%d", node, node.weight)
            return
        vn = self._vn_count(node)
        tokens = [self._hash(node.replica_key(i)) for i in range(vn)]
        with self._lock.write_locked():
            if node in self._nodes:
                log.warning("node=%r is already on the ring, not adding again", node)
                return
            claimed: List[int] = []
            for token in tokens:
                prev = self._owners.get(token)
                if prev is None:
                    self._sorted_tokens.append(token)
                else:
                    self._collisions += 1
                    log.debug("position %d collides: %r overwrites %r", token, node, prev)
                self._owners[token] = node
                claimed.append(token)
            self._sorted_tokens.sort()
            self._nodes[node] = claimed
        log.debug("added node=%r vnodes=%d", node, vn)

    def remove_node(self, node: RingNode) -> bool:
        with self._lock.write_locked():
            claimed = self._nodes.pop(node, None)
            if claimed is None:
                return False
            # positions overwritten by a later colliding node stay with it
            released = {t for t in claimed if self._owners.get(t) == node}
            dropped = set()
            for token in released:
                heir = self._last_claimant(token)
                if heir is None:
                    del self._owners[token]
                    dropped.add(token)
                else:
                    self._owners[token] = heir
            if dropped:
                self._sorted_tokens = [t for t in self._sorted_tokens if t not in dropped]
        log.debug("removed node=%r vnodes=%d handed_back=%d", node, len(dropped), len(released) - len(dropped))
        return True

    def _last_claimant(self, token: int) -> Optional[RingNode]:
        """Most recently added remaining node that also hashed onto ``token``."""
        if not self._collisions:
            return None
        for other in reversed(list(self._nodes)):
            if token in self._nodes[other]:
                return other
        return None

    def _successor(self, target: int) -> int:
        idx = bisect.bisect_left(self._sorted_tokens, target)
        if idx == len(self._sorted_tokens):
            return 0
        return idx

    def get_node(self, key: str) -> RingNode:
        tok = self._hash(key)
        with self._lock.read_locked():
            if not self._sorted_tokens:
                raise EmptyRingError(key)
            return self._owners[self._sorted_tokens[self._successor(tok)]]

    def get_nodes(self, key: str, count: int = 1) -> List[RingNode]:
        """First ``count`` distinct nodes clockwise from the key's position."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"count must be at least 1, got {count!r}")
        tok = self._hash(key)
        with self._lock.read_locked():
            if not self._sorted_tokens:
                raise EmptyRingError(key)
            n = len(self._sorted_tokens)
            want = min(count, len(self._nodes))
            start = self._successor(tok)
            out: List[RingNode] = []
            for step in range(n):
                node = self._owners[self._sorted_tokens[(start + step) % n]]
                if node not in out:
                    out.append(node)
                    if len(out) == want:
                        break
            return out

    def nodes(self) -> List[RingNode]:
        with self._lock.read_locked():
            return list(self._nodes)

    def size(self) -> int:
        with self._lock.read_locked():
            return len(self._nodes)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, node: object) -> bool:
        with self._lock.read_locked():
            return node in self._nodes

    def dump_tokens(self) -> List[Tuple[int, RingNode]]:
        with self._lock.read_locked():
            return [(t, self._owners[t]) for t in self._sorted_tokens]

    def stats(self) -> Dict[str, Union[int, str]]:
        with self._lock.read_locked():
            return {
                "nodes": len(self._nodes),
                "tokens": len(self._sorted_tokens),
                "replica_count": self._replica_count,
                "collisions": self._collisions,
                "hash": hash_name(self._hash),
            }

    def clone(self) -> "ConsistentHasher":
        """Independent copy of the ring for before/after comparison."""
        other = ConsistentHasher(self._replica_count, self._hash)
        with self._lock.read_locked():
            other._sorted_tokens = list(self._sorted_tokens)
            other._owners = dict(self._owners)
            other._nodes = {n: list(ts) for n, ts in self._nodes.items()}
            other._collisions = self._collisions
        return other
