from collections import Counter
from typing import Dict
import logging

from ring_config import get_settings
from consistent_hash_ring import ConsistentHasher
from remap import RemapPlanner
from ring_node import Server

log = logging.getLogger(__name__)


def make_server(server_id: int, weight: int = 1) -> Server:
    return Server(id=server_id, ip=f"192.168.0.{server_id}", port=1080, weight=weight)


def demo_keys(count: int):
    return [f"key123456y{i}" for i in range(count)]


def build_ring(replica_count: int = 100, node_count: int = 19, hash_function: str = "crc32") -> ConsistentHasher:
    ring = ConsistentHasher(replica_count=replica_count, hash_function=hash_function)
    for i in range(1, node_count + 1):
        ring.add_node(make_server(i))
    return ring


def tally(ring: ConsistentHasher, key_count: int = 1000) -> Dict[str, int]:
    """Count lookups per server IP."""
    return dict(Counter(ring.get_node(k).ip for k in demo_keys(key_count)))


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ring = build_ring(settings.replica_count, settings.demo_node_count, settings.hash_function)
    log.info("ring ready: %s", ring.stats())

    counts = tally(ring, settings.demo_key_count)
    for ip, count in sorted(counts.items(), key=lambda kv: int(kv[0].rsplit(".", 1)[1])):
        print("Node IP:", ip, " count:", count)

    # Snapshot ring BEFORE adding one more server
    ring_before = ring.clone()
    ring.add_node(make_server(settings.demo_node_count + 1))

    keys = demo_keys(settings.demo_key_count)
    planner = RemapPlanner()
    plan = planner.plan_moved(keys, ring_before, ring)
    stats = planner.stats(plan, total_keys=len(keys))
    print(f"Moved after adding one server: {stats['moved_count']} keys ({stats.get('moved_fraction', 0.0):.2%})")


if __name__ == "__main__":
    main()
