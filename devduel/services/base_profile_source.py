from abc import ABC, abstractmethod
from typing import List, Optional


class BaseProfileSource(ABC):
    """
    上游资料来源的抽象基类。
    具体实现 (如 GitHubService) 必须实现以下三个原子接口，
    并把 “查无此人 / 限流 / 凭证错误” 抛成可区分的异常 (见 devduel.errors)。
    """

    @abstractmethod
    def get_user(self, handle: str) -> dict:
        """获取用户原始资料；用户不存在时抛出 NotFoundError。"""
        pass

    @abstractmethod
    def list_repositories(self, handle: str) -> List[dict]:
        """获取用户名下的仓库原始列表。"""
        pass

    @abstractmethod
    def get_file_content(self, handle: str, repo: str, path: str) -> Optional[str]:
        """
        读取仓库中的单个文件。
        文件不存在时返回 None 而不是抛异常。
        """
        raise NotImplementedError
