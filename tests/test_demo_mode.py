from conftest import FakeAnalyzer, FakeFetcher, make_profile

from devduel.services.analysis_cache import AnalysisCache
from devduel.services.analysis_pipeline import AnalysisPipeline
from devduel.services.demo_mode import DemoAnalyzer, DemoPolicy, DemoProfileFetcher
from devduel.services.rate_limiter import RateLimiter


def _policy(sleeps, **kwargs):
    return DemoPolicy(sleep=sleeps.append, **kwargs)


def test_sentinel_usernames_are_case_insensitive():
    policy = DemoPolicy()

    assert policy.applies_to("Demo")
    assert policy.applies_to("alice", "TEST")
    assert not policy.applies_to("alice", "bob")


def test_global_demo_mode_applies_to_everyone():
    assert DemoPolicy(enabled=True).applies_to("alice")


def test_sentinel_analysis_skips_live_services():
    sleeps = []
    fetcher, analyzer = FakeFetcher(), FakeAnalyzer()
    policy = _policy(sleeps)
    pipeline = AnalysisPipeline(
        fetcher=DemoProfileFetcher(fetcher, policy),
        analyzer=DemoAnalyzer(analyzer, policy),
        rate_limiter=RateLimiter(max_requests=10, window_seconds=60),
        analysis_cache=AnalysisCache(600),
        compare_cache=AnalysisCache(86400),
    )

    recruiter = pipeline.perform_analysis("demo", "recruiter")
    founder = pipeline.perform_analysis("demo", "founder")

    assert recruiter["success"] is True
    assert recruiter["data"]["total_score"] == 57
    assert recruiter["data"]["is_mock_data"] is False
    assert founder["data"]["total_score"] == 73
    assert founder["cached"] is True
    assert fetcher.calls == []
    assert analyzer.analyze_calls == 0
    assert sleeps == [1.5]


def test_real_users_go_to_live_services():
    sleeps = []
    inner = FakeAnalyzer()
    analyzer = DemoAnalyzer(inner, _policy(sleeps))

    analyzer.analyze(make_profile("alice"))

    assert inner.analyze_calls == 1
    assert sleeps == []


def test_demo_battle_is_flagged_as_mock():
    sleeps = []
    inner = FakeAnalyzer()
    analyzer = DemoAnalyzer(inner, _policy(sleeps, delay_seconds=0))

    result = analyzer.compare(make_profile("demo"), make_profile("alice"), "founder")

    assert result.is_mock_data is True
    assert result.user1_username == "demo"
    assert result.persona == "founder"
    assert inner.compare_calls == 0
    assert sleeps == []


def test_missing_live_fetcher_always_serves_demo_profile():
    fetcher = DemoProfileFetcher(None, DemoPolicy())

    profile = fetcher.fetch_lite("alice")

    assert profile.user.login == "alice"
    assert profile.deep_scan is not None
