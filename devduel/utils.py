# devduel/utils.py

import re
from typing import Optional, Tuple

from devduel.errors import InvalidInputError

MAX_USERNAME_LENGTH = 39

_PROFILE_URL = re.compile(r'^(?:https?://)?(?:www\.)?github\.com/([^/?#\s]+)', re.IGNORECASE)

INVALID_USERNAME_MESSAGE = "Please enter a valid GitHub username or profile URL."
TOO_LONG_MESSAGE = "Username is too long."
SELF_BATTLE_MESSAGE = "You can't battle yourself! Pick two different GitHub users."


def _is_valid_github_username(username):
    """
    验证 GitHub 用户名格式
    规则：只能包含字母、数字、连字符，不能以连字符开头或结尾 (长度单独校验)
    """
    if not username:
        return False
    if username.startswith('-') or username.endswith('-'):
        return False
    return all(c.isascii() and (c.isalnum() or c == '-') for c in username)


def extract_username(raw: Optional[str]) -> Optional[str]:
    """
    从用户输入中提取 GitHub 用户名，支持：
    octocat / @octocat / github.com/octocat / https://github.com/octocat/some-repo
    无法识别时返回 None。
    """
    if not raw or not isinstance(raw, str):
        return None

    text = raw.strip()
    match = _PROFILE_URL.match(text)
    if match:
        text = match.group(1)
    text = text.lstrip('@').strip().rstrip('/')

    return text if _is_valid_github_username(text) else None


def require_username(raw: Optional[str]) -> str:
    """提取并校验用户名，失败抛 InvalidInputError"""
    username = extract_username(raw)
    if not username:
        raise InvalidInputError(INVALID_USERNAME_MESSAGE)
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidInputError(TOO_LONG_MESSAGE)
    return username


def extract_battle_usernames(raw1: Optional[str], raw2: Optional[str]) -> Tuple[str, str]:
    """对战双方用户名；忽略大小写后相同则拒绝 (不能自己和自己对战)"""
    username1 = require_username(raw1)
    username2 = require_username(raw2)
    if username1.lower() == username2.lower():
        raise InvalidInputError(SELF_BATTLE_MESSAGE)
    return username1, username2
