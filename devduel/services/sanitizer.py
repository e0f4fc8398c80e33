"""
Profile sanitizer.

Shrinks a fetched profile before it is sent to the model: drops URLs and
duplicated counters, strips README decoration (badges, images, HTML) and
trims long text to a fixed budget. The transformation is pure and
idempotent, so sanitizing an already sanitized profile changes nothing.
"""

import json
import re
from dataclasses import asdict, replace
from typing import Optional

from devduel.schemas import DeepScan, Profile, Repository
from .github_service import MAX_FILE_CHARS, TRUNCATION_MARKER

README_CHAR_BUDGET = 1500
DESCRIPTION_CHAR_BUDGET = 300
DEEP_SCAN_CHAR_BUDGET = MAX_FILE_CHARS + len(TRUNCATION_MARKER)
MAX_TOPICS = 5

_DROPPED_USER_FIELDS = ('avatar_url', 'html_url')
_DROPPED_REPO_FIELDS = ('full_name', 'html_url', 'watchers', 'has_wiki', 'has_pages')

_HTML_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)
_BADGE_LINK = re.compile(r'\[!\[[^\]]*\]\([^)]*\)\]\([^)]*\)')
_IMAGE = re.compile(r'!\[[^\]]*\]\([^)]*\)')
_HTML_TAG = re.compile(r'<[^>\n]+>')
_TRAILING_SPACE = re.compile(r'[ \t]+$', re.MULTILINE)
_BLANK_LINES = re.compile(r'\n{3,}')


def _clean_once(text: str) -> str:
    text = _HTML_COMMENT.sub('', text)
    text = _BADGE_LINK.sub('', text)
    text = _IMAGE.sub('', text)
    text = _HTML_TAG.sub('', text)
    text = _TRAILING_SPACE.sub('', text)
    text = _BLANK_LINES.sub('\n\n', text)
    return text.strip()


def clean_markdown(text: str) -> str:
    """去掉徽章、图片、HTML 注释和标签；重复执行直到不再变化"""
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def truncate(text: str, limit: int) -> str:
    """截断后的文本 (含标记) 仍然不超过 limit，保证再次截断是空操作"""
    if len(text) <= limit:
        return text
    return text[:limit - len(TRUNCATION_MARKER)].rstrip() + TRUNCATION_MARKER


def _sanitize_text(text: Optional[str], limit: int, markdown: bool = True) -> Optional[str]:
    if not text:
        return None
    if markdown:
        text = clean_markdown(text)
    else:
        text = text.strip()
    return truncate(text, limit) if text else None


def _sanitize_repo(repo: Repository) -> Repository:
    return replace(
        repo,
        full_name=None,
        html_url=None,
        watchers=0,
        has_wiki=False,
        has_pages=False,
        description=_sanitize_text(repo.description, DESCRIPTION_CHAR_BUDGET, markdown=False),
        topics=tuple(repo.topics[:MAX_TOPICS]),
        readme=_sanitize_text(repo.readme, README_CHAR_BUDGET),
    )


def _sanitize_deep_scan(scan: Optional[DeepScan]) -> Optional[DeepScan]:
    if scan is None:
        return None
    return replace(
        scan,
        readme=_sanitize_text(scan.readme, DEEP_SCAN_CHAR_BUDGET),
        # 依赖清单是 JSON/TOML，不做 markdown 清洗
        manifest=_sanitize_text(scan.manifest, DEEP_SCAN_CHAR_BUDGET, markdown=False),
    )


def sanitize(profile: Profile) -> Profile:
    user = replace(profile.user, avatar_url=None, html_url=None)
    return replace(
        profile,
        user=user,
        repos=tuple(_sanitize_repo(repo) for repo in profile.repos),
        deep_scan=_sanitize_deep_scan(profile.deep_scan),
    )


def _compact(data: dict, dropped=()) -> dict:
    return {
        key: value for key, value in data.items()
        if key not in dropped and value is not None and value != '' and value != [] and value != ()
    }


def to_payload(profile: Profile) -> dict:
    """把 profile 转成发给模型的紧凑字典，省略空字段"""
    payload = {
        'user': _compact(asdict(profile.user), _DROPPED_USER_FIELDS),
        'repos': [_compact(asdict(repo), _DROPPED_REPO_FIELDS) for repo in profile.repos],
    }
    if profile.deep_scan is not None:
        payload['deep_scan'] = _compact(asdict(profile.deep_scan))
    if profile.fetched_at:
        payload['fetched_at'] = profile.fetched_at
    return payload


def payload_size(payload) -> int:
    return len(json.dumps(payload, ensure_ascii=False).encode('utf-8'))
