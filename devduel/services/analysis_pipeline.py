# devduel/services/analysis_pipeline.py

import logging
from dataclasses import dataclass

from devduel.errors import DevDuelError, InvalidInputError, RateLimitedError, error_code_for, user_message_for
from devduel.schemas import CompareResult, DualAnalysisResult, Profile
from devduel.utils import extract_battle_usernames, require_username
from .analysis_cache import AnalysisCache, pair_key, single_key
from .battle_service import BattleStore
from .demo_mode import DemoAnalyzer, DemoPolicy, DemoProfileFetcher
from .github_service import GitHubService
from .llm_analysis import LLMAnalysisService
from .personas import DEFAULT_PERSONA, get_persona, with_thresholds
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedAnalysis:
    """单人分析的缓存内容：双视角结果 + 当时抓到的资料"""
    dual: DualAnalysisResult
    profile: Profile

    @property
    def is_mock_data(self) -> bool:
        return self.dual.is_mock_data


class AnalysisPipeline:
    """
    核心流程：限流 -> 校验 -> 缓存 -> 抓取 -> 大模型 -> 写缓存 -> 落库 (仅对战) -> 返回。
    对外只暴露 perform_analysis / perform_comparison 两个入口，
    返回值始终是 {success, data} 或 {success, error}，error 是可直接展示的文案。
    """

    def __init__(self, fetcher, analyzer, rate_limiter: RateLimiter, analysis_cache: AnalysisCache,
                 compare_cache: AnalysisCache, battle_store: BattleStore = None):
        self.fetcher = fetcher
        self.analyzer = analyzer
        self.rate_limiter = rate_limiter
        self.analysis_cache = analysis_cache
        self.compare_cache = compare_cache
        self.battle_store = battle_store

    # ============ 入口 1：单人分析 ============
    def perform_analysis(self, username: str, persona: str = DEFAULT_PERSONA, client_id: str = 'anonymous') -> dict:
        try:
            self._admit(client_id)
            handle = require_username(username)
            persona = self._require_persona(persona)
        except DevDuelError as e:
            return self._failure(e, username or '', 'analysis')

        # 一条缓存同时服务两种 persona，切换视角不会再次调用大模型
        cached = self.analysis_cache.get(single_key(handle))
        if cached is not None:
            return self._analysis_success(cached, persona, cached=True)

        try:
            logger.info(f"[Analysis] Fetching GitHub data for: {handle}")
            profile = self.fetcher.fetch_full(handle)

            logger.info(f"[Analysis] Running dual-persona AI analysis for: {handle}")
            dual = self.analyzer.analyze(profile)
        except Exception as e:
            logger.exception(f"[Analysis] Error for {handle}")
            return self._failure(e, handle, 'analysis')

        entry = CachedAnalysis(dual=dual, profile=profile)
        self.analysis_cache.put(single_key(handle), entry)

        logger.info(f"[Analysis] Complete for: {handle} ({persona}: {dual.for_persona(persona).total_score})")
        return self._analysis_success(entry, persona, cached=False)

    # ============ 入口 2：双人对战 ============
    def perform_comparison(self, username1: str, username2: str, persona: str = DEFAULT_PERSONA,
                           client_id: str = 'anonymous') -> dict:
        try:
            self._admit(client_id)
            handle1, handle2 = extract_battle_usernames(username1, username2)
            persona = self._require_persona(persona)
        except DevDuelError as e:
            return self._failure(e, '', 'comparison')

        key = pair_key(handle1, handle2, persona)
        cached = self.compare_cache.get(key)
        if cached is not None:
            return {'success': True, 'data': _oriented(cached, handle1).to_dict(), 'cached': True}

        try:
            # 两次抓取刻意串行执行，避免触发 GitHub 自身的限流
            logger.info(f"[Battle] Fetching {handle1} then {handle2}")
            profile1 = self.fetcher.fetch_lite(handle1)
            profile2 = self.fetcher.fetch_lite(handle2)

            result = self.analyzer.compare(profile1, profile2, persona)
        except Exception as e:
            logger.exception(f"[Battle] Error for {handle1} vs {handle2}")
            return self._failure(e, getattr(e, 'handle', ''), 'comparison')

        self.compare_cache.put(key, result)
        if not result.is_mock_data:
            self._persist(result)

        return {'success': True, 'data': result.to_dict(), 'cached': False}

    # ============ 辅助函数 ============
    def _admit(self, client_id: str):
        decision = self.rate_limiter.admit(client_id)
        if not decision.allowed:
            logger.warning(f"[RateLimit] BLOCKED: {client_id} (retry in {decision.retry_after:.1f}s)")
            raise RateLimitedError("local rate limit", retry_after=decision.retry_after)
        logger.info(f"[RateLimit] OK: {client_id} ({decision.remaining} remaining)")

    @staticmethod
    def _require_persona(persona: str) -> str:
        if not isinstance(persona, str) or not persona.strip():
            return DEFAULT_PERSONA
        persona = persona.strip().lower()
        try:
            return get_persona(persona).id
        except KeyError:
            raise InvalidInputError(f"Unknown persona \"{persona}\". Choose recruiter or founder.")

    def _persist(self, result: CompareResult):
        if self.battle_store is None:
            return
        try:
            self.battle_store.record_battle(
                user1=result.user1_username,
                user2=result.user2_username,
                score1=result.user1_stats.score,
                score2=result.user2_stats.score,
                winner=result.winner_username(),
                persona=result.persona,
            )
        except Exception:
            logger.exception("[Battle] Failed to persist battle record")

    @staticmethod
    def _analysis_success(entry: CachedAnalysis, persona: str, cached: bool) -> dict:
        return {
            'success': True,
            'data': entry.dual.for_persona(persona).to_dict(),
            'profile': entry.profile.to_dict(),
            'cached': cached,
        }

    @staticmethod
    def _failure(exc: Exception, handle: str, action: str) -> dict:
        return {
            'success': False,
            'error': user_message_for(exc, handle, action),
            'code': error_code_for(exc),
        }


def _oriented(result: CompareResult, first_handle: str) -> CompareResult:
    """缓存键是对称的，但结果有左右之分；按本次请求的顺序返回"""
    if result.user1_username.lower() == first_handle.lower():
        return result
    return result.swapped()


def build_pipeline(config) -> AnalysisPipeline:
    """
    根据配置组装整条流水线。
    demo 相关的分支只在这里决定一次，业务代码里没有演示数据的判断。
    """
    personas = with_thresholds(config.get('VERDICT_STRONG_HIRE', 70), config.get('VERDICT_INTERVIEW', 45))

    policy = DemoPolicy(
        enabled=config.get('DEMO_MODE', False),
        usernames=config.get('DEMO_USERNAMES', ('demo', 'test')),
        delay_seconds=config.get('DEMO_DELAY_SECONDS', 1.5),
    )

    if policy.enabled:
        logger.info("[Pipeline] DEMO_MODE is on: external services are bypassed")
        live_fetcher, live_analyzer = None, None
    else:
        live_fetcher = GitHubService(
            token=config.get('GITHUB_TOKEN'),
            api_base=config.get('GITHUB_API_BASE', 'https://api.github.com'),
        )
        live_analyzer = LLMAnalysisService(
            api_key=config.get('OPENROUTER_API_KEY'),
            base_url=config.get('OPENROUTER_BASE_URL'),
            model=config.get('AI_MODEL'),
            max_retries=config.get('AI_MAX_RETRIES', 2),
            retry_base_delay=config.get('AI_RETRY_BASE_DELAY', 2.0),
            timeout=config.get('AI_TIMEOUT', 60),
            personas=personas,
        )

    return AnalysisPipeline(
        fetcher=DemoProfileFetcher(live_fetcher, policy),
        analyzer=DemoAnalyzer(live_analyzer, policy),
        rate_limiter=RateLimiter(
            max_requests=config.get('RATE_LIMIT_MAX_REQUESTS', 5),
            window_seconds=config.get('RATE_LIMIT_WINDOW_SECONDS', 60),
        ),
        analysis_cache=AnalysisCache(config.get('ANALYSIS_CACHE_TTL', 600), name='analysis'),
        compare_cache=AnalysisCache(config.get('COMPARE_CACHE_TTL', 86400), name='battle'),
        battle_store=BattleStore(),
    )
