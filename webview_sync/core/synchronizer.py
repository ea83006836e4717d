"""单向镜像同步

将静态资源目录镜像到目标目录：
- 目标中缺少的文件/目录会被创建
- 内容或权限不同的文件会被更新
- 目标中多余的条目（包括被排除的文件）会被删除
- 未变化的文件不做任何写操作

变化判断依次比较：文件大小、xxh64 内容哈希、权限位。
不比较修改时间，时钟偏差和低精度时间戳不会影响结果。
"""
import contextlib
import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from xxhash import xxh64

from .exceptions import SyncError
from ..utils.logger import get_logger

CHUNK_SIZE = 64 * 1024
TMP_SUFFIX = ".webview-sync.tmp"

FILE = 'file'
DIRECTORY = 'dir'
SYMLINK = 'symlink'
SPECIAL = 'special'

Exclusion = Callable[[str], bool]

ACTION_LABELS = {
    'delete': '删除',
    'mkdir': '创建目录',
    'copy': '复制',
    'update': '更新'
}


class ExcludeName:
    """按文件名排除，匹配任意层级"""

    def __init__(self, name: str):
        self.name = name

    def __call__(self, rel_path: str) -> bool:
        return rel_path.rsplit('/', 1)[-1] == self.name

    def __repr__(self):
        return f"ExcludeName({self.name!r})"

    def __eq__(self, other):
        return isinstance(other, ExcludeName) and other.name == self.name

    def __hash__(self):
        return hash(self.name)


DEFAULT_EXCLUSIONS = (ExcludeName("README.md"),)


class SyncOperation(NamedTuple):
    action: str  # delete / mkdir / copy / update
    rel_path: str


@dataclass
class SyncResult:
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.deleted or self.directories)

    @property
    def writes(self) -> int:
        """实际执行的文件系统写操作数"""
        if self.dry_run:
            return 0
        return len(self.created) + len(self.updated) + len(self.deleted) + len(self.directories)

    def summary(self) -> str:
        return (f"新增 {len(self.created)}，更新 {len(self.updated)}，"
                f"删除 {len(self.deleted)}，新建目录 {len(self.directories)}")


def _kind(mode: int) -> str:
    if stat.S_ISLNK(mode):
        return SYMLINK
    if stat.S_ISDIR(mode):
        return DIRECTORY
    if stat.S_ISREG(mode):
        return FILE
    return SPECIAL


def _raise(error: OSError):
    raise error


class FileSynchronizer:
    """将 src 镜像到 dst，src 只读"""

    def __init__(self,
                 src: Path,
                 dst: Path,
                 logger: Optional[logging.Logger] = None,
                 exclusions: Sequence[Exclusion] = DEFAULT_EXCLUSIONS):
        self.src = Path(src)
        self.dst = Path(dst)
        self.logger = logger or get_logger("synchronizer")
        self.exclusions = tuple(exclusions)

        self.src_index: Dict[str, dict] = {}
        self.dst_index: Dict[str, dict] = {}
        self.operations: List[SyncOperation] = []
        self.skipped: List[str] = []
        self._created_root = False

    def is_excluded(self, rel_path: str) -> bool:
        return any(rule(rel_path) for rule in self.exclusions)

    def scan_directory(self, path: Path, apply_exclusions: bool = False) -> Dict[str, dict]:
        """深度扫描目录并建立索引（不跟随符号链接）

        键为以 / 分隔的相对路径。apply_exclusions 为真时跳过被排除的条目及其子目录。
        """
        file_index = {}
        try:
            for root, dirs, files in os.walk(path, onerror=_raise):
                rel_root = os.path.relpath(root, path)
                kept_dirs = []
                for name in sorted(dirs) + sorted(files):
                    full_path = os.path.join(root, name)
                    rel_path = Path(rel_root, name).as_posix() if rel_root != '.' else name
                    if apply_exclusions and self.is_excluded(rel_path):
                        continue
                    st = os.lstat(full_path)
                    kind = _kind(st.st_mode)
                    file_index[rel_path] = {
                        'kind': kind,
                        'size': st.st_size,
                        'mtime': st.st_mtime,
                        'mode': stat.S_IMODE(st.st_mode)
                    }
                    if kind == DIRECTORY:
                        kept_dirs.append(name)
                dirs[:] = [d for d in dirs if d in kept_dirs]
        except OSError as e:
            raise SyncError(f"目录扫描失败 ({e.strerror or e})", Path(e.filename or path)) from e
        return file_index

    def calculate_hash(self, filepath: Path) -> str:
        hasher = xxh64()
        with open(filepath, 'rb') as f:
            while chunk := f.read(CHUNK_SIZE):
                hasher.update(chunk)
        return hasher.hexdigest()

    def _files_differ(self, rel_path: str, src_file: dict, dst_file: dict) -> bool:
        if src_file['size'] != dst_file['size']:
            return True
        try:
            if self.calculate_hash(self.src / rel_path) != self.calculate_hash(self.dst / rel_path):
                return True
        except OSError as e:
            raise SyncError(f"读取文件失败 ({e.strerror or e})", Path(e.filename or rel_path)) from e
        return src_file['mode'] != dst_file['mode']

    def prepare_destination(self, dry_run: bool = False):
        """检查源目录并确保目标目录存在"""
        if not self.src.is_dir():
            raise SyncError("源目录不存在", self.src)
        if self.dst.exists() or self.dst.is_symlink():
            if not self.dst.is_dir():
                raise SyncError("目标路径已存在且不是目录", self.dst)
            return
        self._created_root = True
        if dry_run:
            return
        try:
            self.dst.mkdir(parents=True)
        except OSError as e:
            raise SyncError(f"创建目标目录失败 ({e.strerror or e})", self.dst) from e
        self.logger.debug(f"已创建目标目录 {self.dst}")

    def compare_and_index_files(self) -> List[SyncOperation]:
        """比较两棵目录树，生成同步计划（删除 -> 建目录 -> 复制/更新）"""
        self.src_index = self.scan_directory(self.src, apply_exclusions=True)
        self.dst_index = self.scan_directory(self.dst) if self.dst.is_dir() else {}
        self.operations = []
        self.skipped = []

        for rel_path, src_file in list(self.src_index.items()):
            if src_file['kind'] not in (FILE, DIRECTORY):
                self.logger.warning(f"跳过非普通文件 ({src_file['kind']}): {rel_path}")
                self.skipped.append(rel_path)
                del self.src_index[rel_path]

        # 父目录排在子路径之前，已删除目录下的条目无需单独删除
        deleted_dirs = []
        for rel_path in sorted(self.dst_index):
            dst_file = self.dst_index[rel_path]
            src_file = self.src_index.get(rel_path)
            if src_file is not None and src_file['kind'] == dst_file['kind']:
                continue
            if any(rel_path.startswith(d + '/') for d in deleted_dirs):
                continue
            self.operations.append(SyncOperation('delete', rel_path))
            if dst_file['kind'] == DIRECTORY:
                deleted_dirs.append(rel_path)

        creates = []
        for rel_path in sorted(self.src_index):
            src_file = self.src_index[rel_path]
            dst_file = self.dst_index.get(rel_path)
            missing = dst_file is None or dst_file['kind'] != src_file['kind']
            if src_file['kind'] == DIRECTORY:
                if missing:
                    self.operations.append(SyncOperation('mkdir', rel_path))
            elif missing:
                creates.append(SyncOperation('copy', rel_path))
            elif self._files_differ(rel_path, src_file, dst_file):
                creates.append(SyncOperation('update', rel_path))

        self.operations.extend(creates)
        return self.operations

    def _remove(self, path: Path):
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    def _copy_file(self, src_path: Path, dst_path: Path):
        # 先写临时文件再原子替换，目标中的只读文件也能被更新；
        # mkstemp 以 O_EXCL 创建，临时文件不会覆盖已有条目
        fd, tmp_name = tempfile.mkstemp(dir=dst_path.parent, prefix=f".{dst_path.name}.", suffix=TMP_SUFFIX)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            shutil.copy2(src_path, tmp_path)
            os.replace(tmp_path, dst_path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise

    def _apply_directory_modes(self, rel_paths: List[str]):
        # 子目录内容全部写完后再设置权限，只读的源目录也能正常同步；由深到浅
        for rel_path in sorted(rel_paths, key=lambda p: p.count('/'), reverse=True):
            target = self.dst / rel_path
            try:
                shutil.copymode(self.src / rel_path, target)
            except OSError as e:
                raise SyncError(f"设置目录权限失败 ({e.strerror or e})", target) from e

    def execute_sync(self, dry_run: bool = False) -> SyncResult:
        """执行同步操作"""
        result = SyncResult(dry_run=dry_run, skipped=list(self.skipped))
        if self._created_root:
            result.directories.append('.')

        created_dirs = []
        for action, rel_path in self.operations:
            target = self.dst / rel_path
            label = ACTION_LABELS.get(action, action)
            if dry_run:
                self.logger.info(f"[模拟] {label} {rel_path}")
            else:
                try:
                    if action == 'delete':
                        self._remove(target)
                    elif action == 'mkdir':
                        target.mkdir()
                        created_dirs.append(rel_path)
                    elif action in ('copy', 'update'):
                        self._copy_file(self.src / rel_path, target)
                    else:
                        raise ValueError(f"未知的同步操作: {action}")
                except OSError as e:
                    self.logger.error(f"{label}失败 {rel_path}: {e}")
                    raise SyncError(f"{label}失败 ({e.strerror or e})", target) from e
                self.logger.debug(f"{label}: {rel_path}")

            if action == 'delete':
                result.deleted.append(rel_path)
            elif action == 'mkdir':
                result.directories.append(rel_path)
            elif action == 'copy':
                result.created.append(rel_path)
            else:
                result.updated.append(rel_path)

        self._apply_directory_modes(created_dirs)
        return result

    def run(self, dry_run: bool = False) -> SyncResult:
        self._created_root = False
        self.prepare_destination(dry_run)
        self.compare_and_index_files()
        result = self.execute_sync(dry_run)
        if result.changed:
            self.logger.info(f"{'[模拟] ' if dry_run else ''}同步完成 {self.src} -> {self.dst}: {result.summary()}")
        else:
            self.logger.info(f"目标目录已是最新: {self.dst}")
        return result


def sync(staging: Path,
         destination: Path,
         exclusions: Sequence[Exclusion] = DEFAULT_EXCLUSIONS,
         logger: Optional[logging.Logger] = None,
         dry_run: bool = False) -> SyncResult:
    """将 staging 镜像到 destination"""
    return FileSynchronizer(staging, destination, logger=logger, exclusions=exclusions).run(dry_run=dry_run)
