import os
import sys

import pytest
from pathlib import Path

from webview_sync.core.destination import (
    SyncTarget,
    check_destination,
    find_project_root,
    normalize_destination,
    resolve_staging,
    resolve_target,
)
from webview_sync.core.exceptions import (
    DestinationError,
    HostPlatformError,
    InvalidPlatformError,
    MissingPlatformError,
    RepositoryRootError,
    StagingDirectoryError,
    UsageError,
)
from webview_sync.core.platform import Platform

from conftest import write

REPO = Path("/repo")


@pytest.mark.parametrize("destination", [
    "/repo/android/app/build/intermediates/webview",
    "/repo/android/app/build/webview",
    "/repo/android/app/build/generated/assets/main/webview",
])
def test_android_destinations_accepted_on_any_host(destination):
    for host in ("Linux", "Darwin", "Windows"):
        check_destination(Platform.ANDROID, Path(destination), REPO, host_system=host)


@pytest.mark.parametrize("destination", [
    "/repo/android/app/src/webview",
    "/repo/android/app/webview",
    "/elsewhere/android/app/build/webview",
    "/repo/ios/App/webview",
])
def test_android_destination_outside_build_dir_rejected(destination):
    with pytest.raises(DestinationError) as exc_info:
        check_destination(Platform.ANDROID, Path(destination), REPO, host_system="Linux")
    assert destination in str(exc_info.value)


def test_ios_destination_accepted_on_darwin():
    check_destination(Platform.IOS, Path("/repo/ios/Foo/webview"), REPO, host_system="Darwin")


def test_ios_requires_darwin_host():
    with pytest.raises(HostPlatformError):
        check_destination(Platform.IOS, Path("/repo/ios/Foo/webview"), REPO, host_system="Linux")


@pytest.mark.parametrize("host", ["Linux", "Darwin"])
def test_wrong_basename_is_contract_error_regardless_of_host(host):
    with pytest.raises(DestinationError) as exc_info:
        check_destination(Platform.IOS, Path("/repo/ios/Foo/assets"), REPO, host_system=host)
    assert "/repo/ios/Foo/assets" in str(exc_info.value)


def test_ios_destination_outside_ios_dir_rejected():
    with pytest.raises(DestinationError):
        check_destination(Platform.IOS, Path("/repo/build/webview"), REPO, host_system="Darwin")


def test_normalize_relative_to_cwd(tmp_path):
    assert normalize_destination("out/webview", cwd=tmp_path) == Path(os.path.realpath(tmp_path)) / "out" / "webview"


def test_normalize_collapses_dot_segments(tmp_path):
    result = normalize_destination(tmp_path / "a" / ".." / "b" / "." / "webview")
    assert result == Path(os.path.realpath(tmp_path)) / "b" / "webview"


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks")
def test_normalize_resolves_symlinks(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    os.symlink(real, tmp_path / "link")

    result = normalize_destination(tmp_path / "link" / "missing" / "webview")

    assert result == Path(os.path.realpath(real)) / "missing" / "webview"


def test_find_project_root_from_nested_directory(repo):
    nested = repo / "src" / "webview" / "static" / "js"
    assert find_project_root(nested) == Path(os.path.realpath(repo))


def test_find_project_root_from_file(repo):
    assert find_project_root(repo / "src" / "webview" / "static" / "index.html") == Path(os.path.realpath(repo))


def test_find_project_root_accepts_git_file(tmp_path):
    worktree = tmp_path / "worktree"
    write(worktree / ".git", "gitdir: /somewhere/else")
    (worktree / "sub").mkdir()

    assert find_project_root(worktree / "sub") == Path(os.path.realpath(worktree))


def test_find_project_root_outside_repository(tmp_path, monkeypatch):
    start = tmp_path / "plain"
    start.mkdir()
    monkeypatch.setattr(Path, "exists", lambda self: False)

    with pytest.raises(RepositoryRootError):
        find_project_root(start)


def test_resolve_staging_missing(tmp_path):
    with pytest.raises(StagingDirectoryError):
        resolve_staging(tmp_path)


def test_resolve_staging_not_a_directory(tmp_path):
    write(tmp_path / "src" / "webview" / "static", "file")
    with pytest.raises(StagingDirectoryError):
        resolve_staging(tmp_path)


def test_resolve_target_android(repo):
    destination = repo / "android" / "app" / "build" / "intermediates" / "webview"

    target = resolve_target(Platform.ANDROID, str(destination), project_root=repo)

    root = Path(os.path.realpath(repo))
    assert target == SyncTarget(
        platform=Platform.ANDROID,
        destination=root / "android" / "app" / "build" / "intermediates" / "webview",
        staging=root / "src" / "webview" / "static",
        project_root=root,
    )


def test_resolve_target_relative_destination(repo):
    target = resolve_target(Platform.ANDROID, "build/assets/webview", project_root=repo, cwd=repo / "android" / "app")
    assert target.destination == Path(os.path.realpath(repo)) / "android" / "app" / "build" / "assets" / "webview"


def test_resolve_target_ios_on_linux_host(repo):
    with pytest.raises(HostPlatformError):
        resolve_target(Platform.IOS, str(repo / "ios" / "Foo" / "webview"), project_root=repo, host_system="Linux")


def test_resolve_target_without_sanity_checks(repo, tmp_path):
    target = resolve_target(Platform.ANDROID, str(tmp_path / "anything"), sanity_checks=False, project_root=repo)
    assert target.destination == Path(os.path.realpath(tmp_path)) / "anything"


def test_resolve_target_missing_staging(repo):
    import shutil
    shutil.rmtree(repo / "src")

    with pytest.raises(StagingDirectoryError):
        resolve_target(Platform.ANDROID, str(repo / "android" / "app" / "build" / "webview"), project_root=repo)


def test_resolve_target_missing_project_root(tmp_path):
    with pytest.raises(RepositoryRootError):
        resolve_target(Platform.ANDROID, "webview", project_root=tmp_path / "nope")


@pytest.mark.parametrize("relative", ["src/webview/static/webview", "src/webview"])
def test_destination_overlapping_staging_is_rejected(repo, relative):
    with pytest.raises(DestinationError):
        resolve_target(Platform.ANDROID, str(repo / relative), sanity_checks=False, project_root=repo)


def test_resolve_target_does_not_create_destination(repo):
    destination = repo / "android" / "app" / "build" / "webview"
    resolve_target(Platform.ANDROID, str(destination), project_root=repo)
    assert not destination.exists()


def test_platform_parse():
    assert Platform.parse("ios") is Platform.IOS
    assert Platform.parse("android") is Platform.ANDROID
    assert str(Platform.ANDROID) == "android"


@pytest.mark.parametrize("token", ["iOS", "IOS", "Android", "windows", ""])
def test_platform_parse_is_exact(token):
    with pytest.raises(InvalidPlatformError) as exc_info:
        Platform.parse(token)
    assert isinstance(exc_info.value, UsageError)


def test_platform_parse_missing():
    with pytest.raises(MissingPlatformError):
        Platform.parse(None)
