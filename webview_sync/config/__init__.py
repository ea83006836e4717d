from pathlib import Path, PurePosixPath
import configparser
import logging
from typing import Dict, Any, Optional

from ..core.exceptions import ConfigError

DEFAULT_CONFIG = {
    'general': {
        'log_level': 'INFO',
        'log_file': ''
    },
    'paths': {
        'project_root': '',
        'staging_dir': 'src/webview/static'
    },
    'sync': {
        'exclude': 'README.md'
    }
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """读取 INI 配置，未给出的项使用默认值"""
    config = configparser.ConfigParser()
    config.read_dict(DEFAULT_CONFIG)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(f"配置文件不存在: {config_path}")
        try:
            with open(config_path, encoding='utf-8') as f:
                config.read_file(f)
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"配置文件加载失败 {config_path}: {e}") from e

    log_level = config.get('general', 'log_level').strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"未知的日志级别: {log_level}")

    staging_dir = config.get('paths', 'staging_dir').strip()
    if not staging_dir or PurePosixPath(staging_dir).is_absolute() or Path(staging_dir).is_absolute():
        raise ConfigError(f"staging_dir 必须是相对项目根目录的路径: {staging_dir!r}")

    log_file = config.get('general', 'log_file').strip()
    project_root = config.get('paths', 'project_root').strip()
    exclude = [name.strip() for name in config.get('sync', 'exclude').split(',') if name.strip()]

    return {
        'log_level': getattr(logging, log_level),
        'log_file': Path(log_file).expanduser() if log_file else None,
        'project_root': Path(project_root).expanduser() if project_root else None,
        'staging_dir': Path(*PurePosixPath(staging_dir).parts),
        'exclude': tuple(exclude)
    }
