import logging
import os
import sys
from typing import Optional, Sequence

from ..config import load_config
from ..core.destination import resolve_target
from ..core.exceptions import UsageError, WebviewSyncError
from ..core.prebuild import run_prebuild_steps
from ..core.synchronizer import ExcludeName, sync
from ..utils.logger import setup_logger
from .parser import create_parser, is_help_request, parse_arguments

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def invocation_name() -> str:
    name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    if not name or name == "__main__.py":
        return "webview-sync"
    return name


def main(argv: Optional[Sequence[str]] = None, prog: Optional[str] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    prog = prog or invocation_name()
    logger = setup_logger(prog)
    parser = create_parser(prog)

    if is_help_request(argv):
        parser.print_help(sys.stderr)
        return EXIT_OK

    try:
        args = parse_arguments(argv, parser)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        logger.error(f"错误: {e}")
        return EXIT_USAGE

    try:
        config = load_config(args.config)
        level = logging.DEBUG if args.verbose else config['log_level']
        logger = setup_logger(prog, level, config['log_file'])

        target = resolve_target(
            args.platform,
            args.destination,
            sanity_checks=args.sanity_checks,
            project_root=config['project_root'],
            staging_subpath=config['staging_dir']
        )
        if not args.sanity_checks:
            logger.debug("已跳过目标目录检查")
        logger.debug(f"platform={target.platform} staging={target.staging} destination={target.destination}")

        run_prebuild_steps(target, logger)
        sync(
            target.staging,
            target.destination,
            exclusions=[ExcludeName(name) for name in config['exclude']],
            logger=logger,
            dry_run=args.dry_run
        )
    except KeyboardInterrupt:
        logger.error("错误: 操作被用户中断")
        return EXIT_INTERRUPTED
    except WebviewSyncError as e:
        logger.error(f"错误: {e}")
        return e.exit_code

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
