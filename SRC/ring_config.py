import os
from functools import lru_cache


class Settings:
    def __init__(self):
        self.replica_count: int = int(os.getenv("RING_REPLICA_COUNT", "100"))
        self.hash_function: str = os.getenv("RING_HASH_FUNCTION", "crc32").strip().lower()
        self.log_level: str = os.getenv("RING_LOG_LEVEL", "INFO").strip().upper()

        # demo only
        self.demo_node_count: int = int(os.getenv("DEMO_NODE_COUNT", "19"))
        self.demo_key_count: int = int(os.getenv("DEMO_KEY_COUNT", "1000"))


@lru_cache()
def get_settings():
    return Settings()
