# devduel/services/demo_mode.py

import logging
import time

from .fixtures import MOCK_DUAL, demo_comparison, demo_profile

logger = logging.getLogger(__name__)

DEFAULT_DEMO_USERNAMES = ('demo', 'test')


class DemoPolicy:
    """
    决定哪些请求走演示数据：
    - enabled=True 时全部请求都走演示数据 (全局 demo 模式)
    - 否则只有哨兵用户名 (demo / test) 走演示数据
    """

    def __init__(self, enabled: bool = False, usernames=DEFAULT_DEMO_USERNAMES,
                 delay_seconds: float = 1.5, sleep=time.sleep):
        self.enabled = enabled
        self.usernames = {name.lower() for name in usernames}
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def applies_to(self, *handles) -> bool:
        return self.enabled or any(handle.lower() in self.usernames for handle in handles)

    def simulate_latency(self):
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)


class DemoProfileFetcher:
    """包装真实的 GitHubService，演示用户名不访问 GitHub"""

    def __init__(self, inner, policy: DemoPolicy):
        self.inner = inner
        self.policy = policy

    def fetch_full(self, handle: str):
        if self.inner is None or self.policy.applies_to(handle):
            return demo_profile(handle)
        return self.inner.fetch_full(handle)

    def fetch_lite(self, handle: str):
        if self.inner is None or self.policy.applies_to(handle):
            return demo_profile(handle)
        return self.inner.fetch_lite(handle)


class DemoAnalyzer:
    """包装真实的 LLMAnalysisService，演示请求跳过大模型调用"""

    def __init__(self, inner, policy: DemoPolicy):
        self.inner = inner
        self.policy = policy

    def analyze(self, profile):
        login = profile.user.login
        if self.inner is None or self.policy.applies_to(login):
            logger.info(f"[AI] DEMO MODE: Returning mock dual analysis for {login}.")
            self.policy.simulate_latency()
            return MOCK_DUAL
        return self.inner.analyze(profile)

    def compare(self, profile1, profile2, persona: str):
        login1, login2 = profile1.user.login, profile2.user.login
        if self.inner is None or self.policy.applies_to(login1, login2):
            logger.info(f"[AI] DEMO MODE: Returning mock battle for {login1} vs {login2}.")
            self.policy.simulate_latency()
            return demo_comparison(login1, login2, persona)
        return self.inner.compare(profile1, profile2, persona)
