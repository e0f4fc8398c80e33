"""
Shared data models for the analysis pipeline.

Profiles are immutable snapshots of what GitHub returned; analysis and
comparison results are created by the model client after validation.
"""

from dataclasses import dataclass, field, asdict, replace
from typing import Dict, List, Optional, Tuple

DIMENSION_KEYS = ('documentation', 'code_structure', 'consistency', 'impact', 'technical_depth')

VERDICTS = ('Strong Hire', 'Interview', 'Pass')

WINNER_CHOICES = ('user1', 'user2', 'tie')

HEAD_TO_HEAD_KEYS = ('velocity', 'quality', 'impact')

HEAD_TO_HEAD_CHOICES = ('user1', 'user2')


@dataclass(frozen=True)
class GitHubUser:
    """GitHub 用户基本资料"""
    login: str
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    blog: Optional[str] = None
    twitter_username: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    public_gists: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> 'GitHubUser':
        return cls(
            login=data.get('login'),
            name=data.get('name'),
            bio=data.get('bio'),
            avatar_url=data.get('avatar_url'),
            html_url=data.get('html_url'),
            company=data.get('company'),
            location=data.get('location'),
            blog=data.get('blog') or None,
            twitter_username=data.get('twitter_username'),
            followers=data.get('followers') or 0,
            following=data.get('following') or 0,
            public_repos=data.get('public_repos') or 0,
            public_gists=data.get('public_gists') or 0,
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )


@dataclass(frozen=True)
class Repository:
    """单个仓库的摘要信息，readme 只在完整模式下填充"""
    name: str
    full_name: Optional[str] = None
    html_url: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    topics: Tuple[str, ...] = ()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None
    homepage: Optional[str] = None
    fork: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    license: Optional[str] = None
    readme: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict, readme: Optional[str] = None) -> 'Repository':
        license_info = data.get('license') or {}
        return cls(
            name=data.get('name'),
            full_name=data.get('full_name'),
            html_url=data.get('html_url'),
            description=data.get('description'),
            language=data.get('language'),
            stars=data.get('stargazers_count') or 0,
            forks=data.get('forks_count') or 0,
            watchers=data.get('watchers_count') or 0,
            open_issues=data.get('open_issues_count') or 0,
            topics=tuple(data.get('topics') or ()),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            pushed_at=data.get('pushed_at'),
            homepage=data.get('homepage') or None,
            fork=bool(data.get('fork')),
            has_wiki=bool(data.get('has_wiki')),
            has_pages=bool(data.get('has_pages')),
            license=license_info.get('spdx_id') or None,
            readme=readme,
        )


@dataclass(frozen=True)
class DeepScan:
    """排名第一的仓库的 README + 依赖清单"""
    top_repo_name: str
    readme: Optional[str] = None
    manifest_path: Optional[str] = None
    manifest: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    user: GitHubUser
    repos: Tuple[Repository, ...] = ()
    deep_scan: Optional[DeepScan] = None
    fetched_at: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DimensionScore:
    score: int
    comment: str = ''


@dataclass(frozen=True)
class AnalysisResult:
    total_score: int
    summary: str
    dimensions: Dict[str, DimensionScore]
    verdict: str
    role_fit: str = ''
    actionable_feedback: List[str] = field(default_factory=list)
    is_mock_data: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        # 前端沿用原始字段名
        data['recruiter_verdict'] = data.pop('verdict')
        return data

    def as_fallback(self, note: str) -> 'AnalysisResult':
        return replace(self, is_mock_data=True, summary=f'{note} {self.summary}')


@dataclass(frozen=True)
class DualAnalysisResult:
    """一次模型调用同时产出两种视角，切换 persona 时无需再次调用"""
    recruiter: AnalysisResult
    founder: AnalysisResult

    @property
    def is_mock_data(self) -> bool:
        return self.recruiter.is_mock_data or self.founder.is_mock_data

    def for_persona(self, persona: str) -> AnalysisResult:
        return self.founder if persona == 'founder' else self.recruiter

    def to_dict(self) -> dict:
        return {'recruiter': self.recruiter.to_dict(), 'founder': self.founder.to_dict()}


@dataclass(frozen=True)
class UserStats:
    score: int
    top_repo: str = ''
    deep_scan_insight: Optional[str] = None


_MIRROR = {'user1': 'user2', 'user2': 'user1'}


@dataclass(frozen=True)
class CompareResult:
    winner: str
    winner_reason: str
    head_to_head: Dict[str, str]
    user1_stats: UserStats
    user2_stats: UserStats
    user1_username: str
    user2_username: str
    persona: str = 'recruiter'
    is_mock_data: bool = False

    def swapped(self) -> 'CompareResult':
        """交换左右两方，用于对称缓存命中时保持调用方的顺序"""
        return replace(
            self,
            winner=_MIRROR.get(self.winner, self.winner),
            head_to_head={k: _MIRROR.get(v, v) for k, v in self.head_to_head.items()},
            user1_stats=self.user2_stats,
            user2_stats=self.user1_stats,
            user1_username=self.user2_username,
            user2_username=self.user1_username,
        )

    def winner_username(self) -> str:
        if self.winner == 'user1':
            return self.user1_username
        if self.winner == 'user2':
            return self.user2_username
        return 'tie'

    def to_dict(self) -> dict:
        return asdict(self)
