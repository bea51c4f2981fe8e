"""基于 Pydantic Settings 的配置管理，支持环境变量、.env 与 YAML 端点文件。"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_HASH_SIZE = 50 * 1024 * 1024  # 50 MB


def _normalize_endpoints(raw: dict) -> dict[str, str]:
    """校验端点名并把根目录转成绝对路径。"""
    out: dict[str, str] = {}
    for name, root in raw.items():
        name = str(name).strip()
        if not name or "/" in name:
            raise ValueError(f"invalid endpoint name {name!r}: must be non-empty and contain no '/'")
        root = str(root).strip() if root is not None else ""
        if not root:
            raise ValueError(f"endpoint {name!r} has an empty root path")
        out[name] = os.path.abspath(os.path.expanduser(root))
    return out


def load_endpoints_file(path: str) -> dict[str, str]:
    """读取 YAML 端点文件，支持顶层直接映射或 endpoints: 下的映射。"""
    with Path(path).expanduser().open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if isinstance(data, dict) and isinstance(data.get("endpoints"), dict):
        data = data["endpoints"]
    if not isinstance(data, dict):
        raise ValueError(f"endpoints file {path!r} must contain a mapping of name to path")
    return _normalize_endpoints(data)


class Settings(BaseSettings):
    """
    全局配置。环境变量前缀 APP_，优先级：环境变量 > .env > 默认值。
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: Literal["development", "staging", "production"] = "development"
    port: int = 8080
    log_level: str = "INFO"
    # 日志目录，按小时轮转；app.log 为全部级别，error.log 仅 ERROR
    log_dir: str = "./logs"
    # 控制台是否输出 JSON；关闭时使用 structlog 的开发格式
    log_json: bool = True

    # 端点表：APP_ENDPOINTS='{"docs": "/srv/docs"}'，与 endpoints_file 合并，环境变量优先
    endpoints: dict[str, str] = {}
    endpoints_file: str = ""

    # 0 表示不限制
    max_hash_size: int = DEFAULT_MAX_HASH_SIZE
    max_tree_depth: int = 0
    download_chunk_size: int = 64 * 1024

    # 隔离检查前是否解析符号链接（realpath 复核）
    resolve_symlinks: bool = True

    api_tokens: str = ""  # 逗号分隔的合法 Bearer Token，空表示不校验（仅开发）

    # slowapi 默认限流，如 "120/minute"；空表示不限流
    rate_limit: str = ""

    @field_validator("endpoints", mode="before")
    @classmethod
    def parse_endpoints(cls, v: object) -> object:
        if isinstance(v, dict):
            return _normalize_endpoints(v)
        return v

    @model_validator(mode="after")
    def merge_endpoints_file(self) -> "Settings":
        if self.endpoints_file.strip():
            merged = load_endpoints_file(self.endpoints_file.strip())
            merged.update(self.endpoints)
            self.endpoints = merged
        return self

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ("DEBUG", "INFO", "WARNING", "ERROR")
        u = v.upper()
        if u not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return u

    @field_validator("max_hash_size", "max_tree_depth")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("download_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("download_chunk_size must be > 0")
        return v

    def get_valid_api_tokens(self) -> frozenset[str]:
        """返回合法 Token 集合。"""
        if not self.api_tokens or not self.api_tokens.strip():
            return frozenset()
        return frozenset(t.strip() for t in self.api_tokens.split(",") if t.strip())

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> Settings:
    """获取单例配置，便于测试时覆盖。"""
    return Settings()
