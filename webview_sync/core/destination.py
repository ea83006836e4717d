"""目标路径解析与校验

由构建系统（Xcode / Gradle）传入平台与目标目录，这里负责：
- 将目标路径规范化为绝对路径（目标可以尚不存在）
- 定位项目根目录（包含 .git 的最近上级目录）
- 按平台检查目标目录是否位于约定的构建输出位置
- 解析静态资源目录
"""
import os
import platform as host_platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .exceptions import (
    DestinationError,
    HostPlatformError,
    RepositoryRootError,
    StagingDirectoryError,
)
from .platform import Platform

DESTINATION_NAME = "webview"
STAGING_SUBPATH = Path("src", "webview", "static")

# 各平台目标目录必须位于的前缀（相对项目根目录）
PLATFORM_PREFIXES = {
    Platform.IOS: Path("ios"),
    Platform.ANDROID: Path("android", "app", "build"),
}

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class SyncTarget:
    platform: Platform
    destination: Path
    staging: Path
    project_root: Path


def normalize_destination(raw: PathLike, cwd: Optional[PathLike] = None) -> Path:
    """相对路径基于 cwd 解析，并展开符号链接和 . / .. 段"""
    path = Path(raw)
    if not path.is_absolute():
        path = Path(cwd if cwd is not None else os.getcwd()) / path
    return Path(os.path.realpath(path))


def find_project_root(start: Optional[PathLike] = None) -> Path:
    """自 start 向上查找包含 .git 的目录（.git 可以是 worktree 的文件）"""
    start = Path(start) if start is not None else Path(__file__)
    start = Path(os.path.realpath(start))
    if not start.is_dir():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    raise RepositoryRootError(f"未找到 git 版本库根目录: {start}")


def _is_under(path: Path, prefix: Path) -> bool:
    return prefix in path.parents


def check_destination(platform: Platform,
                      destination: Path,
                      project_root: Path,
                      host_system: Optional[str] = None) -> None:
    """检查目标目录是否符合平台构建约定，不符合时抛出异常"""
    if destination.name != DESTINATION_NAME:
        raise DestinationError(
            f"目标目录名必须为 '{DESTINATION_NAME}'", destination)

    if platform is Platform.IOS:
        host = host_system if host_system is not None else host_platform.system()
        if host != "Darwin":
            raise HostPlatformError(f"ios 平台只能在 macOS 上同步（当前主机: {host or '未知'}）")

    prefix = project_root / PLATFORM_PREFIXES[platform]
    if not _is_under(destination, prefix):
        raise DestinationError(
            f"{platform} 目标目录必须位于 {prefix} 之下", destination)


def resolve_staging(project_root: Path, staging_subpath: PathLike = STAGING_SUBPATH) -> Path:
    staging = project_root / staging_subpath
    if not staging.exists():
        raise StagingDirectoryError(f"静态资源目录不存在: {staging}")
    if not staging.is_dir():
        raise StagingDirectoryError(f"静态资源路径不是目录: {staging}")
    return staging


def resolve_target(platform: Platform,
                   raw_destination: PathLike,
                   sanity_checks: bool = True,
                   project_root: Optional[PathLike] = None,
                   cwd: Optional[PathLike] = None,
                   host_system: Optional[str] = None,
                   staging_subpath: PathLike = STAGING_SUBPATH) -> SyncTarget:
    """解析并校验一次同步所需的全部路径

    project_root 为空时从本模块所在位置向上查找版本库根目录。
    本函数不修改文件系统。
    """
    destination = normalize_destination(raw_destination, cwd)

    if project_root is None:
        root = find_project_root()
    else:
        root = Path(os.path.realpath(project_root))
        if not root.is_dir():
            raise RepositoryRootError(f"项目根目录不存在: {root}")

    if sanity_checks:
        check_destination(platform, destination, root, host_system)

    staging = resolve_staging(root, staging_subpath)
    staging_real = Path(os.path.realpath(staging))
    # 目标与资源目录不能互相包含，否则镜像会写入或删除资源目录
    if destination == staging_real or _is_under(destination, staging_real) or _is_under(staging_real, destination):
        raise DestinationError("目标目录与静态资源目录重叠", destination)

    return SyncTarget(platform=platform, destination=destination, staging=staging, project_root=root)
