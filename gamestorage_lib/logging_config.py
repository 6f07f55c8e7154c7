from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

DEFAULT_LOG_LEVEL = logging.WARNING
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def configure_logging(config_path: Optional[Path] = None, level: Optional[str] = None) -> logging.Logger:
    """Configure root logging for the application.

    The level comes from `level` when given, otherwise from the `log_level`
    key of the server config at `config_path`, otherwise WARNING. Returns a
    module logger for the caller.
    """
    log_level = DEFAULT_LOG_LEVEL

    if level is None and config_path is not None and config_path.exists():
        try:
            with config_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
                level = _cfg.get('log_level') if isinstance(_cfg, dict) else None
        except (OSError, yaml.YAMLError):
            # If config parse fails, fall back to default level
            level = None

    if isinstance(level, str):
        _numeric = getattr(logging, level.upper(), None)
        if isinstance(_numeric, int):
            log_level = _numeric

    logging.log(100, f'[gamestorage]: Log level set to: {logging.getLevelName(log_level)}')

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('multipart').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(max(log_level, logging.INFO))
    logger.info("Starting Game Storage Server")

    return logger
