"""What the ring needs from a node: a weight and per-replica keys.
Any hashable value with these two members can be placed on the ring.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class RingNode(Protocol):
    weight: int

    def replica_key(self, index: int) -> str:
        """Deterministic string for virtual replica ``index``, unique per node."""
        ...


@dataclass(frozen=True)
class Server:
    id: int
    ip: str
    port: int
    weight: int = 1

    @property
    def address(self) -> str:
        return f"{self.ip}:{self.port}"

    def replica_key(self, index: int) -> str:
        return f"{self.id}-{self.address}-{self.weight}-{index}"
