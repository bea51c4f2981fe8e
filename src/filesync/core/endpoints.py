"""端点表：启动时由配置构建一次，之后只读，可无锁并发访问。"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType

from filesync.core.config import get_settings
from filesync.core.errors import ErrorKind, FileServiceError


class EndpointRegistry(Mapping[str, str]):
    """端点名 -> 根目录绝对路径 的不可变映射。"""

    def __init__(self, endpoints: Mapping[str, str]) -> None:
        self._roots = MappingProxyType(dict(endpoints))

    def __getitem__(self, name: str) -> str:
        return self._roots[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    def root_of(self, name: str) -> str:
        try:
            return self._roots[name]
        except KeyError:
            raise FileServiceError(
                ErrorKind.ENDPOINT_NOT_FOUND, log_message=f"endpoint '{name}' not found"
            ) from None

    def names(self) -> list[str]:
        return sorted(self._roots)


@lru_cache
def get_endpoint_registry() -> EndpointRegistry:
    """获取单例端点表，测试时可通过 dependency_overrides 替换。"""
    return EndpointRegistry(get_settings().endpoints)
