# devduel/services/analysis_cache.py

import logging
import threading
import time

logger = logging.getLogger(__name__)


def single_key(username: str) -> str:
    """单人分析的缓存键：小写用户名"""
    return username.lower()


def pair_key(username1: str, username2: str, persona: str) -> str:
    """
    对战的缓存键：两个用户名小写后按字母序排列，再拼上 persona。
    保证 A vs B 与 B vs A 命中同一条缓存。
    """
    first, second = sorted((username1.lower(), username2.lower()))
    return f'{first}:{second}:{persona}'


class AnalysisCache:
    """
    进程内 TTL 缓存，只用来省掉昂贵的大模型调用。
    - 过期判定在读取时进行 (惰性淘汰)，没有后台清理线程
    - 被标记为 mock/fallback 的结果一律拒绝写入
    - 并发写入同一个键时后写者胜出
    """

    def __init__(self, ttl_seconds: float, clock=time.monotonic, name: str = 'cache'):
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key: str):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, stored_at = entry
            age = self._clock() - stored_at
            if age > self.ttl_seconds:
                del self._entries[key]
                logger.info(f"[Cache:{self.name}] Expired for: {key}")
                return None

        logger.info(f"[Cache:{self.name}] HIT for: {key} (age: {round(age)}s)")
        return value

    def put(self, key: str, value) -> bool:
        if getattr(value, 'is_mock_data', False):
            logger.info(f"[Cache:{self.name}] SKIPPED mock data for: {key}")
            return False

        with self._lock:
            self._entries[key] = (value, self._clock())
            size = len(self._entries)

        logger.info(f"[Cache:{self.name}] STORED {key} (total cached: {size})")
        return True

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)
