from pathlib import Path
from typing import Optional


class WebviewSyncError(Exception):
    """工具所有异常的基类"""

    exit_code = 1


class UsageError(WebviewSyncError):
    """命令行参数错误（退出码 2）"""

    exit_code = 2


class MissingPlatformError(UsageError):
    def __init__(self):
        super().__init__("缺少平台参数（应为 'ios' 或 'android'）")


class InvalidPlatformError(UsageError):
    def __init__(self, token: str):
        super().__init__(f"无效的平台 {token!r}（应为 'ios' 或 'android'）")
        self.token = token


class MissingDestinationError(UsageError):
    def __init__(self):
        super().__init__("缺少必需参数 --destination <path>")


class HostPlatformError(WebviewSyncError):
    """当前主机无法构建所选平台"""


class RepositoryRootError(WebviewSyncError):
    """未找到所在的版本库根目录"""


class StagingDirectoryError(WebviewSyncError):
    """静态资源目录不存在或不是目录"""


class ConfigError(WebviewSyncError):
    """配置文件加载失败"""


class DestinationError(WebviewSyncError):
    """目标路径与平台构建目录约定不符"""

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path


class PrebuildError(WebviewSyncError):
    """同步前构建步骤失败"""


class SyncError(WebviewSyncError):
    """同步过程中的 I/O 错误"""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(f"{message}: {path}" if path is not None else message)
        self.path = path
