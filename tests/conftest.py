"""全局测试 fixtures：临时端点目录、测试用 Settings、带依赖覆盖的 app。"""

from __future__ import annotations

from pathlib import Path

import pytest

from filesync.core.config import Settings, get_settings
from filesync.core.endpoints import EndpointRegistry, get_endpoint_registry


# ---------------------------------------------------------------------------
# 测试数据工厂
# ---------------------------------------------------------------------------

TRUTH_TEXT = b"No, there's nothing you say that can salvage the lie, but I'm trying to keep my intentions disguised"
TIME_TEXT = b"The time is gone, the song is over, thought I'd something more to say"
WISH_TEXT = b"Swimming in a fish bowl. Year after year. Running over the same old ground."
NORMAL_TEXT = b"I am totally normal"


def mk_dirs(base: Path, dirs: list[str]) -> None:
    for d in dirs:
        (base / d).mkdir(parents=True, exist_ok=True)


def mk_files(base: Path, files: dict[str, bytes]) -> None:
    for rel, data in files.items():
        p = base / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)


@pytest.fixture
def music_base(tmp_path: Path) -> Path:
    """
    tmp/
      seether/truth.txt
      pink-floyd/freq/time.txt
      pink-floyd/wish-you-where-here.txt
      normal/file.txt
      normal/not-a-file/
      random            (普通文件，用作“不是目录”的端点)
    """
    mk_dirs(tmp_path, ["seether", "pink-floyd/freq", "normal/not-a-file"])
    mk_files(
        tmp_path,
        {
            "seether/truth.txt": TRUTH_TEXT,
            "pink-floyd/freq/time.txt": TIME_TEXT,
            "pink-floyd/wish-you-where-here.txt": WISH_TEXT,
            "normal/file.txt": NORMAL_TEXT,
            "random": b"",
        },
    )
    return tmp_path


@pytest.fixture
def registry(music_base: Path) -> EndpointRegistry:
    return EndpointRegistry(
        {
            "seether": str(music_base / "seether"),
            "pink": str(music_base / "pink-floyd"),
            "normal": str(music_base / "normal"),
            "random": str(music_base / "random"),
        }
    )


# ---------------------------------------------------------------------------
# Settings / app fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """返回一个不依赖 .env 的 Settings。"""
    return Settings(
        env="development",
        endpoints={},
        api_tokens="",
        max_hash_size=1000,
        download_chunk_size=8,
        _env_file=None,
    )


@pytest.fixture
def api_app(registry: EndpointRegistry, test_settings: Settings):
    """全局 app，覆盖端点表与配置依赖；测试结束后清理。"""
    from filesync.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_endpoint_registry] = lambda: registry
    yield app
    app.dependency_overrides.clear()
