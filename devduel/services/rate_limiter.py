# devduel/services/rate_limiter.py

import logging
import threading
import time
from collections import deque, namedtuple

logger = logging.getLogger(__name__)

RateLimitResult = namedtuple('RateLimitResult', ['allowed', 'remaining', 'retry_after'])


class RateLimiter:
    """
    按客户端 IP 做滑动窗口准入控制。
    计数只保存在进程内存中，重启即清零。
    """

    def __init__(self, max_requests: int = 5, window_seconds: float = 60.0, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits = {}
        self._lock = threading.Lock()

    def admit(self, client_id: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(client_id, deque())

            # 丢弃窗口之外的旧请求
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_requests:
                # 配额为 0 时窗口里没有记录，只能等一个完整窗口
                retry_after = self.window_seconds - (now - hits[0]) if hits else self.window_seconds
                return RateLimitResult(False, 0, max(retry_after, 0.0))

            hits.append(now)
            return RateLimitResult(True, self.max_requests - len(hits), 0.0)

    def reset(self):
        with self._lock:
            self._hits.clear()
