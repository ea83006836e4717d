import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .. import __version__
from ..core.exceptions import MissingDestinationError, UsageError
from ..core.platform import Platform

HELP_TOKENS = ("-h", "--help")

DESCRIPTION = """\
将 <project-root>/src/webview/static 镜像到平台构建目录。
只写入内容或权限发生变化的文件；静态资源目录中不存在的条目
以及 README.md 文件会从目标目录中删除。"""

EPILOG = """\
示例:
  %(prog)s ios --destination "$TARGET_BUILD_DIR/$UNLOCALIZED_RESOURCES_FOLDER_PATH/webview"
  %(prog)s android --destination app/build/generated/assets/webview
  %(prog)s help"""


class CommandLineParser(argparse.ArgumentParser):
    """解析失败时抛出 UsageError，而不是直接退出进程"""

    def error(self, message):
        raise UsageError(message)


@dataclass(frozen=True)
class Arguments:
    platform: Platform
    destination: str
    sanity_checks: bool = True
    dry_run: bool = False
    verbose: bool = False
    config: Optional[Path] = None


def create_parser(prog: str = "webview-sync") -> argparse.ArgumentParser:
    """创建并配置命令行参数解析器"""
    parser = CommandLineParser(
        prog=prog,
        usage="%(prog)s <ios|android> --destination <path> [--no-sanity-checks] [options]\n"
              "       %(prog)s --help | -h | help",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False  # 只接受完整的选项名
    )

    # choices 不交给 argparse 检查，以便给出专门的错误类型
    parser.add_argument(
        "platform",
        nargs="?",
        metavar="ios|android",
        help="目标平台"
    )
    parser.add_argument(
        "--destination",
        metavar="PATH",
        help="同步目标目录，目录名必须为 'webview'"
    )
    parser.add_argument(
        "--no-sanity-checks",
        dest="sanity_checks",
        action="store_false",
        help="跳过目标目录与平台构建约定的检查"
    )

    extra = parser.add_argument_group("其他选项")
    extra.add_argument(
        "--dry-run",
        action="store_true",
        help="试运行模式（只输出将要执行的操作）"
    )
    extra.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="输出每一项文件操作"
    )
    extra.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="INI 配置文件"
    )
    extra.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    extra.add_argument(
        "-h", "--help",
        action="store_true",
        help="显示帮助信息并退出"
    )
    return parser


def is_help_request(argv: Sequence[str]) -> bool:
    """帮助请求优先于其它参数的校验"""
    if not argv:
        return False
    return argv[0] == "help" or any(arg in HELP_TOKENS for arg in argv)


def parse_arguments(argv: Sequence[str], parser: Optional[argparse.ArgumentParser] = None) -> Arguments:
    parser = parser or create_parser()
    namespace = parser.parse_args(list(argv))

    platform = Platform.parse(namespace.platform)
    if not namespace.destination:
        raise MissingDestinationError()

    return Arguments(
        platform=platform,
        destination=namespace.destination,
        sanity_checks=namespace.sanity_checks,
        dry_run=namespace.dry_run,
        verbose=namespace.verbose,
        config=namespace.config
    )
