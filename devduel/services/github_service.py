# devduel/services/github_service.py

import base64
import binascii
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional

import requests

from devduel.errors import NotFoundError, RateLimitedError, UpstreamAuthError, UpstreamError
from devduel.schemas import DeepScan, GitHubUser, Profile, Repository
from .base_profile_source import BaseProfileSource

logger = logging.getLogger(__name__)

# GitHub API 的基础 URL
GITHUB_API_BASE = "https://api.github.com"

# 每次最多拉取的仓库池大小
REPO_POOL_SIZE = 30
# 完整模式：按相关度保留前 6 个仓库，并读取 README
FULL_REPO_LIMIT = 6
# 精简模式 (对战)：按 Star 保留前 15 个仓库，不读 README
LITE_REPO_LIMIT = 15

# Deep Scan 读取的单个文件最多保留的字符数
MAX_FILE_CHARS = 3000
TRUNCATION_MARKER = "\n[...TRUNCATED]"

# 根据仓库主语言选择依赖清单文件，默认 package.json
MANIFEST_BY_LANGUAGE = {
    'Python': 'requirements.txt',
    'Go': 'go.mod',
    'Rust': 'Cargo.toml',
    'Java': 'pom.xml',
    'Kotlin': 'build.gradle.kts',
    'Ruby': 'Gemfile',
    'PHP': 'composer.json',
}
DEFAULT_MANIFEST = 'package.json'


def repository_relevance(repo: dict) -> int:
    """
    仓库相关度：Star > 原创 > 有描述 > 有 Topics。
    只用于挑选仓库，不会存储。
    """
    return (
            (repo.get('stargazers_count') or 0) * 5 +  # Star 权重最高
            (0 if repo.get('fork') else 10) +  # 原创加分
            (5 if repo.get('description') else 0) +
            (3 if repo.get('topics') else 0)
    )


def select_top_repositories(raw_repos: List[dict], limit: int = FULL_REPO_LIMIT) -> List[dict]:
    # sorted 是稳定排序，相关度相同时保持输入顺序
    return sorted(raw_repos, key=repository_relevance, reverse=True)[:limit]


def select_by_stars(raw_repos: List[dict], limit: int = LITE_REPO_LIMIT) -> List[dict]:
    return sorted(raw_repos, key=lambda r: r.get('stargazers_count') or 0, reverse=True)[:limit]


def manifest_for_language(language: Optional[str]) -> str:
    return MANIFEST_BY_LANGUAGE.get(language or '', DEFAULT_MANIFEST)


def truncate_file(text: str, limit: int = MAX_FILE_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


class GitHubService(BaseProfileSource):
    """GitHub 开发者资料获取服务 (只负责抓取和整形，不做缓存)"""

    def __init__(self, token: Optional[str] = None, api_base: str = GITHUB_API_BASE,
                 session: Optional[requests.Session] = None, timeout: int = 10):
        self.token = token if token is not None else os.environ.get('GITHUB_TOKEN')
        self.api_base = api_base.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    # 核心辅助方法：统一生成带 Token 的请求头
    def _get_headers(self):
        headers = {
            'Accept': 'application/vnd.github.v3+json',
        }
        if self.token:
            headers['Authorization'] = f'token {self.token}'
        return headers

    def _get(self, path: str, handle: str, params: Optional[dict] = None):
        url = f"{self.api_base}{path}"
        try:
            response = self.session.get(url, headers=self._get_headers(), params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"GitHub request failed for {path}: {e}") from e

        self._check_response(response, handle)
        return response

    def _check_response(self, response, handle: str):
        """把 GitHub 的失败响应翻译成可区分的异常类型"""
        status = response.status_code
        if status < 400:
            return

        if status == 404:
            raise NotFoundError(f"GitHub resource not found for {handle}", handle=handle)

        if status == 401:
            raise UpstreamAuthError("GitHub rejected the token: bad credentials")

        remaining = response.headers.get('X-RateLimit-Remaining')
        if status == 429 or (status == 403 and (remaining == '0' or 'rate limit' in (response.text or '').lower())):
            reset = response.headers.get('X-RateLimit-Reset')
            retry_after = max(0, int(reset) - int(time.time())) if reset and reset.isdigit() else 60
            raise RateLimitedError("GitHub API rate limit exceeded", retry_after=retry_after, upstream=True)

        raise UpstreamError(f"GitHub REST error {status}: {(response.text or '')[:300]}")

    def get_user(self, handle: str) -> dict:
        return self._get(f"/users/{handle}", handle).json()

    def list_repositories(self, handle: str) -> List[dict]:
        params = {
            'type': 'owner',  # 只要本人的仓库
            'sort': 'updated',
            'direction': 'desc',
            'per_page': REPO_POOL_SIZE,
        }
        return self._get(f"/users/{handle}/repos", handle, params=params).json()

    def get_file_content(self, handle: str, repo: str, path: str) -> Optional[str]:
        """
        读取仓库中的单个文件，解码后截断到 MAX_FILE_CHARS。
        文件不存在或不是 base64 编码时返回 None。
        """
        try:
            data = self._get(f"/repos/{handle}/{repo}/contents/{path}", handle).json()
        except NotFoundError:
            return None

        if not isinstance(data, dict) or data.get('encoding') != 'base64' or not data.get('content'):
            return None

        decoded = _decode_base64(data['content'])
        return truncate_file(decoded) if decoded is not None else None

    def fetch_readme(self, handle: str, repo: str) -> Optional[str]:
        """
        获取仓库 README 全文 (不截断，交给 sanitizer 处理)。
        README 只是补充信息：读取失败只记日志并返回 None，不影响整个 profile。
        """
        try:
            data = self._get(f"/repos/{handle}/{repo}/readme", handle).json()
        except NotFoundError:
            return None
        except (UpstreamError, UpstreamAuthError) as e:
            logger.warning(f"[GitHub] Failed to fetch README for {handle}/{repo}: {e}")
            return None

        if not isinstance(data, dict):
            return None
        # GitHub API 返回的 content 是 Base64 编码的，需要解码
        content_encoded = data.get('content') or ''
        if data.get('encoding') == 'base64':
            return _decode_base64(content_encoded)
        return content_encoded or None

    def fetch_full(self, handle: str) -> Profile:
        """
        完整抓取 (单人分析)：
        1. 用户资料
        2. 最多 30 个仓库，按相关度挑出前 6 个
        3. 逐个读取 README
        """
        user = GitHubUser.from_api(self.get_user(handle))
        raw_repos = self.list_repositories(handle)

        top_repos = select_top_repositories(raw_repos, FULL_REPO_LIMIT)
        logger.info(f"[GitHub] Smart Sort: Selected {', '.join(_describe(r) for r in top_repos)}")

        repos = tuple(
            Repository.from_api(repo, readme=self.fetch_readme(handle, repo['name']))
            for repo in top_repos
        )

        return Profile(user=user, repos=repos, fetched_at=_now_iso())

    def fetch_lite(self, handle: str) -> Profile:
        """
        精简抓取 (对战模式)：
        按 Star 取前 15 个仓库、不读 README，
        只对排名第一的仓库做 Deep Scan (README + 依赖清单)。
        """
        user = GitHubUser.from_api(self.get_user(handle))
        raw_repos = self.list_repositories(handle)

        top_repos = select_by_stars(raw_repos, LITE_REPO_LIMIT)
        logger.info(f"[GitHub-Lite] {handle}: Top {len(top_repos)} repos by stars -> "
                    f"{', '.join(_describe(r) for r in top_repos)}")

        repos = tuple(Repository.from_api(repo) for repo in top_repos)
        deep_scan = self.deep_scan(handle, top_repos[0]) if top_repos else None

        return Profile(user=user, repos=repos, deep_scan=deep_scan, fetched_at=_now_iso())

    def deep_scan(self, handle: str, repo: dict) -> DeepScan:
        repo_name = repo['name']
        manifest_path = manifest_for_language(repo.get('language'))

        # 两个文件走不同的接口，可以并发读取
        with ThreadPoolExecutor(max_workers=2) as pool:
            readme_future = pool.submit(self.get_file_content, handle, repo_name, 'README.md')
            manifest_future = pool.submit(self.get_file_content, handle, repo_name, manifest_path)
            readme = readme_future.result()
            manifest = manifest_future.result()

        logger.info(f"[Deep Scan] {handle}/{repo_name}: README={'YES' if readme else 'NO'}, "
                    f"{manifest_path}={'YES' if manifest else 'NO'}")
        return DeepScan(top_repo_name=repo_name, readme=readme, manifest_path=manifest_path, manifest=manifest)


def _decode_base64(content: str) -> Optional[str]:
    """解码失败 (内容被截断或不是合法 base64) 时返回 None"""
    try:
        return base64.b64decode(content).decode('utf-8', errors='ignore')
    except (binascii.Error, ValueError):
        return None


def _describe(repo: dict) -> str:
    return f"{repo.get('name')}(★{repo.get('stargazers_count') or 0})"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
