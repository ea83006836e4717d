import logging

import pytest
from pathlib import Path

from webview_sync.utils.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def write(path: Path, content: str = "content") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def tree(root: Path):
    """返回 {相对路径: 内容}，目录的值为 None"""
    result = {}
    for p in sorted(root.rglob("*")):
        rel = p.relative_to(root).as_posix()
        result[rel] = None if p.is_dir() else p.read_bytes()
    return result


@pytest.fixture
def repo(tmp_path):
    """带有 .git 标记和静态资源目录的假项目"""
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    staging = root / "src" / "webview" / "static"
    write(staging / "index.html", "<html></html>")
    write(staging / "js" / "app.js", "console.log('app');")
    write(staging / "css" / "style.css", "body {}")
    write(staging / "README.md", "informational")
    write(staging / "js" / "README.md", "informational")
    (root / "ios").mkdir()
    (root / "android" / "app" / "build").mkdir(parents=True)
    return root


@pytest.fixture
def staging(repo):
    return repo / "src" / "webview" / "static"


@pytest.fixture
def config_file(tmp_path, repo):
    path = tmp_path / "webview-sync.cfg"
    path.write_text(f"[paths]\nproject_root = {repo}\n")
    return path
