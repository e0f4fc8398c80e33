# tests/conftest.py
"""
Pytest configuration and shared fakes.
Adds the project root to sys.path so `config` and `devduel` import without installing.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from devduel import create_app  # noqa: E402
from devduel.database import db  # noqa: E402
from devduel.schemas import CompareResult, GitHubUser, Profile, Repository, UserStats  # noqa: E402
from devduel.services.analysis_cache import AnalysisCache  # noqa: E402
from devduel.services.analysis_pipeline import AnalysisPipeline  # noqa: E402
from devduel.services.battle_service import BattleStore  # noqa: E402
from devduel.services.fixtures import MOCK_DUAL  # noqa: E402
from devduel.services.rate_limiter import RateLimiter  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_profile(login: str, repos=None) -> Profile:
    repos = repos if repos is not None else (Repository(name=f"{login}-app", stars=3, language="Python"),)
    return Profile(user=GitHubUser(login=login, bio="builder"), repos=tuple(repos))


class FakeFetcher:
    def __init__(self, errors=None):
        self.calls = []
        self.errors = errors or {}

    def _fetch(self, mode, handle):
        self.calls.append((mode, handle))
        if handle.lower() in self.errors:
            raise self.errors[handle.lower()]
        return make_profile(handle)

    def fetch_full(self, handle):
        return self._fetch('full', handle)

    def fetch_lite(self, handle):
        return self._fetch('lite', handle)


class FakeAnalyzer:
    def __init__(self, dual=MOCK_DUAL, compare_error=None, mock_compare=False):
        self.dual = dual
        self.compare_error = compare_error
        self.mock_compare = mock_compare
        self.analyze_calls = 0
        self.compare_calls = 0

    def analyze(self, profile):
        self.analyze_calls += 1
        return self.dual

    def compare(self, profile1, profile2, persona):
        self.compare_calls += 1
        if self.compare_error is not None:
            raise self.compare_error
        return CompareResult(
            winner='user1',
            winner_reason='ships faster',
            head_to_head={'velocity': 'user1', 'quality': 'user2', 'impact': 'user1'},
            user1_stats=UserStats(score=81, top_repo=f"{profile1.user.login}-app"),
            user2_stats=UserStats(score=64, top_repo=f"{profile2.user.login}-app"),
            user1_username=profile1.user.login,
            user2_username=profile2.user.login,
            persona=persona,
            is_mock_data=self.mock_compare,
        )


class FakeStore:
    def __init__(self, fail=False):
        self.records = []
        self.fail = fail

    def record_battle(self, **kwargs):
        if self.fail:
            raise RuntimeError("database is down")
        self.records.append(kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def pipeline(fetcher, analyzer, store, clock):
    return AnalysisPipeline(
        fetcher=fetcher,
        analyzer=analyzer,
        rate_limiter=RateLimiter(max_requests=100, window_seconds=60, clock=clock),
        analysis_cache=AnalysisCache(600, clock=clock),
        compare_cache=AnalysisCache(86400, clock=clock),
        battle_store=store,
    )


@pytest.fixture
def app(fetcher, analyzer, clock):
    """使用内存 SQLite 和真实 BattleStore 的应用；外部服务仍然是假的"""
    app_pipeline = AnalysisPipeline(
        fetcher=fetcher,
        analyzer=analyzer,
        rate_limiter=RateLimiter(max_requests=100, window_seconds=60, clock=clock),
        analysis_cache=AnalysisCache(600, clock=clock),
        compare_cache=AnalysisCache(86400, clock=clock),
        battle_store=BattleStore(),
    )
    app = create_app('testing', pipeline=app_pipeline)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
