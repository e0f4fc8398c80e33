import json
import logging
import os
import time

import requests

from devduel.errors import ModelUnavailableError, ServiceMisconfiguredError
from devduel.schemas import CompareResult, DualAnalysisResult, Profile
from .fixtures import fallback_dual
from .personas import PERSONAS, build_compare_system_prompt, build_dual_system_prompt
from .sanitizer import payload_size, sanitize, to_payload
from .scoring import extract_json, validate_comparison, validate_dual_analysis, winner_matches_scores

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"


class LLMAnalysisService:
    """
    AI 分析服务：负责调用大模型 (OpenAI 兼容接口) 并清洗数据。
    - analyze: 单人双视角分析，重试耗尽后返回带标记的兜底数据
    - compare: 双人对战，重试耗尽后直接抛出最后一次的错误
    """

    def __init__(self, api_key=None, base_url=None, model=None, max_retries: int = 2,
                 retry_base_delay: float = 2.0, timeout: int = 60, personas=None,
                 session=None, sleep=time.sleep):
        self.api_key = api_key if api_key is not None else os.environ.get('OPENROUTER_API_KEY')
        self.base_url = (base_url or os.environ.get('OPENROUTER_BASE_URL') or DEFAULT_BASE_URL).rstrip('/')
        self.model = model or os.environ.get('AI_MODEL') or DEFAULT_MODEL
        self.max_retries = max(1, max_retries)
        self.retry_base_delay = retry_base_delay
        self.timeout = timeout
        self.personas = personas or PERSONAS
        self.session = session or requests.Session()
        self._sleep = sleep

    def _require_api_key(self):
        if not self.api_key:
            raise ServiceMisconfiguredError("OPENROUTER_API_KEY is not set")

    def analyze(self, profile: Profile) -> DualAnalysisResult:
        """
        对单个用户做双视角分析 (recruiter + founder 一次返回)。
        网络/解析/结构错误都会触发重试；全部失败时返回兜底数据，保证前端总能渲染。
        """
        self._require_api_key()

        payload = self._sanitized_payload(profile)
        system_prompt = build_dual_system_prompt(self.personas)
        user_prompt = ("Analyze this GitHub profile from BOTH perspectives (recruiter AND founder). "
                       "Return a single JSON with both:\n\n"
                       f"{json.dumps(payload, ensure_ascii=False)}")

        def attempt():
            content = self._call_model(system_prompt, user_prompt, max_tokens=1500)
            return validate_dual_analysis(extract_json(content), self.personas)

        try:
            result = self._with_retries(f"analysis of {profile.user.login}", attempt)
        except Exception as e:
            logger.warning(f"[AI] All attempts failed ({e}). Falling back to MOCK DATA.")
            return fallback_dual()

        logger.info(f"[AI] Success! Recruiter: {result.recruiter.total_score}, Founder: {result.founder.total_score}")
        return result

    def compare(self, profile1: Profile, profile2: Profile, persona: str) -> CompareResult:
        """
        双人对战。这里不做兜底：在两个真实用户之间编造胜负比直接报错更糟糕。
        """
        self._require_api_key()

        username1, username2 = profile1.user.login, profile2.user.login
        system_prompt = build_compare_system_prompt(self.personas[persona])
        user_prompt = ("Compare these two GitHub developers and return the JSON verdict:\n\n"
                       + json.dumps({'user1': self._sanitized_payload(profile1),
                                     'user2': self._sanitized_payload(profile2)}, ensure_ascii=False))

        def attempt():
            content = self._call_model(system_prompt, user_prompt, max_tokens=1000)
            return validate_comparison(extract_json(content), username1, username2, persona)

        result = self._with_retries(f"battle {username1} vs {username2}", attempt)

        if not winner_matches_scores(result):
            logger.warning(f"[AI] Declared winner '{result.winner}' disagrees with scores "
                           f"{result.user1_stats.score} vs {result.user2_stats.score}")
        logger.info(f"[AI] Battle result: {result.winner} "
                    f"({username1}: {result.user1_stats.score}, {username2}: {result.user2_stats.score})")
        return result

    def _sanitized_payload(self, profile: Profile) -> dict:
        raw_size = payload_size(profile.to_dict())
        payload = to_payload(sanitize(profile))
        clean_size = payload_size(payload)
        reduction = round((1 - clean_size / raw_size) * 100) if raw_size else 0
        logger.info(f"[AI] Payload sanitized for {profile.user.login}: "
                    f"{raw_size / 1024:.1f}kb -> {clean_size / 1024:.1f}kb ({reduction}% reduction)")
        return payload

    def _with_retries(self, label: str, attempt):
        """指数退避重试：第 n 次重试前等待 base * 2^(n-1) 秒"""
        last_error = None
        for index in range(self.max_retries):
            if index > 0:
                delay = self.retry_base_delay * (2 ** (index - 1))
                logger.info(f"[AI] Retry attempt {index + 1} for {label} after {delay}s...")
                self._sleep(delay)
            try:
                logger.info(f"[AI] Calling {self.model} for {label}, attempt {index + 1}...")
                return attempt()
            except Exception as e:
                last_error = e
                logger.warning(f"[AI] Attempt {index + 1} for {label} failed: {e}")
        raise last_error

    def _call_model(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        调用 chat/completions 接口，返回模型输出的原始文本
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "DevDuel",
        }

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": 0.4,
            "max_tokens": max_tokens,
            "seed": 42
        }

        response = self.session.post(f"{self.base_url}/chat/completions", headers=headers, json=payload,
                                     timeout=self.timeout)

        if response.status_code in (402, 429):
            raise ModelUnavailableError(f"AI service quota or rate limit hit (HTTP {response.status_code})")
        if response.status_code == 404:
            raise ModelUnavailableError(f"AI model {self.model} not found")
        response.raise_for_status()

        result = response.json()
        if isinstance(result, dict) and result.get('error'):
            error = result['error']
            message = str(error.get('message', error) if isinstance(error, dict) else error)
            code = error.get('code') if isinstance(error, dict) else None
            if code in (402, 429) or 'quota' in message.lower() or 'rate limit' in message.lower():
                raise ModelUnavailableError(message)
            raise ValueError(f"AI service returned an error: {message}")

        try:
            content = result['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            raise ValueError("API 返回格式异常")

        if not content:
            raise ValueError("Empty response from AI")
        return content
