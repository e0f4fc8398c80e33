# devduel/errors.py

import math


class DevDuelError(Exception):
    """
    所有业务异常的基类。
    code 用于视图层映射 HTTP 状态码，user_message() 返回可直接展示给用户的文案。
    """
    code = 'unexpected'
    default_message = 'An unexpected error occurred. Please try again in a moment.'

    def user_message(self, handle: str = '') -> str:
        return self.default_message


class InvalidInputError(DevDuelError):
    """输入非法：用户名为空/格式错误/过长、未知 persona、自己和自己对战"""
    code = 'invalid_input'

    def user_message(self, handle: str = '') -> str:
        # 校验失败的文案在抛出时就已经确定
        return str(self)


class RateLimitedError(DevDuelError):
    """
    限流：既可能来自本地准入控制 (upstream=False)，也可能来自 GitHub 配额耗尽 (upstream=True)。
    """
    code = 'rate_limited'

    def __init__(self, message: str = 'rate limited', retry_after: float = 0.0, upstream: bool = False):
        super().__init__(message)
        self.retry_after = retry_after
        self.upstream = upstream

    def user_message(self, handle: str = '') -> str:
        if self.upstream:
            return 'GitHub API rate limit reached. Please try again in a few minutes.'
        seconds = math.ceil(self.retry_after)
        return f'Too many requests. Please wait {seconds} seconds before trying again.'


class NotFoundError(DevDuelError):
    """上游 (GitHub) 查无此人"""
    code = 'not_found'

    def __init__(self, message: str = 'not found', handle: str = ''):
        super().__init__(message)
        self.handle = handle

    def user_message(self, handle: str = '') -> str:
        name = self.handle or handle
        return f'GitHub user "{name}" not found. Please check the username and try again.'


class UpstreamAuthError(DevDuelError):
    """GitHub Token 无效 (401)"""
    code = 'upstream_auth'
    default_message = 'GitHub token is invalid. Please check your GITHUB_TOKEN.'


class UpstreamError(DevDuelError):
    """GitHub 返回了其它无法归类的错误 (5xx、网络异常等)"""
    code = 'unexpected'


class ServiceMisconfiguredError(DevDuelError):
    """缺少必需的外部服务凭证，例如 OPENROUTER_API_KEY"""
    code = 'misconfigured'
    default_message = 'AI service is not configured. Please set OPENROUTER_API_KEY.'


class ModelUnavailableError(DevDuelError):
    """大模型服务不可用：429 / 配额耗尽 / 模型不存在"""
    code = 'model_unavailable'
    default_message = 'AI service rate limit reached. Please wait 1-2 minutes and try again.'


def user_message_for(exc: Exception, handle: str = '', action: str = 'analysis') -> str:
    """把任意异常转换成对外文案，绝不透传原始异常信息。"""
    if isinstance(exc, DevDuelError) and exc.code != 'unexpected':
        return exc.user_message(handle)
    return f'An unexpected error occurred during {action}. Please try again in a moment.'


def error_code_for(exc: Exception) -> str:
    if isinstance(exc, DevDuelError):
        return exc.code
    return 'unexpected'
