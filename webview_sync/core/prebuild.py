import logging
from typing import Callable, Iterable, Optional

from .destination import SyncTarget
from .exceptions import PrebuildError, WebviewSyncError

PrebuildStep = Callable[[SyncTarget, logging.Logger], None]

# 同步前执行的构建步骤，目前为空
PREBUILD_STEPS = ()


def run_prebuild_steps(target: SyncTarget,
                       logger: logging.Logger,
                       steps: Optional[Iterable[PrebuildStep]] = None) -> int:
    """按顺序执行同步前构建步骤，返回执行的步骤数"""
    steps = PREBUILD_STEPS if steps is None else steps
    count = 0
    for step in steps:
        name = getattr(step, '__name__', repr(step))
        logger.debug(f"执行构建步骤: {name}")
        try:
            step(target, logger)
        except WebviewSyncError:
            raise
        except Exception as e:
            raise PrebuildError(f"构建步骤 {name} 失败: {e}") from e
        count += 1
    return count
