"""Server setup helper for the game storage server.

Provides CLI parsing and the YAML server configuration: locating it,
writing the default template and loading it into module state so the rest
of the application can consult feature flags and properties. Storage
composition is left to `gamestorage_lib.main`.
"""
from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("data/config/server_config.yml")
CONFIG_ENV = "GAMESTORAGE_CONFIG"
SKIP_SETUP_ENV = "GAMESTORAGE_SKIP_SETUP"
SCHEMA_VERSION = 1

# Module-level place to hold the loaded server config after setup
_loaded_config: list[Dict[str, Any]] = []


def get_loaded_config() -> Optional[Dict[str, Any]]:
    """Return the loaded server config if available, otherwise None."""
    return _loaded_config[0] if _loaded_config else None


def has_feature_flag(name: str) -> bool:
    cfg = get_loaded_config() or {}
    flags = cfg.get("feature_flags") or {}
    return bool(flags.get(name, False))


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False, description="Game storage server")
    p.add_argument("--config", help=f"Path to the server configuration (default: ${CONFIG_ENV} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--init", action="store_true", help="Write the default configuration if it is missing")
    p.add_argument("--print-template", action="store_true", help="Print the default YAML template to stdout and exit")
    p.add_argument("--clean", action="store_true", help="Delete every stored document and exit")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    p.add_argument("--port", type=int, default=int(os.environ.get("PORT", "3400")), help="Port to listen on")
    p.add_argument("--help", action="store_true", help="Show this help")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    """Parse setup-related args from argv, ignoring unknown ones."""
    parser = get_parser()
    if argv is not None:
        argv = list(argv)
    args, _ = parser.parse_known_args(argv)
    return args


def get_config_path(explicit: Optional[str | Path] = None) -> Path:
    if explicit:
        return Path(explicit)
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def default_template() -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "server_name": "Game Storage Server",
        "log_level": "INFO",
        "api_path": "/api",
        "storage_backend": "file",
        "serializer": "json",
        "data_dir": "data",
        "collection": "documents",
        "feature_flags": {
            "gamestorage_use_brotli": False,
        },
    }


def render_template() -> str:
    return yaml.safe_dump(default_template(), sort_keys=False)


def write_template(path: Path) -> bool:
    """Write the default configuration to `path` unless it already exists."""
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_template(), encoding="utf-8")
    return True


def load_server_config(path: Path) -> Dict[str, Any]:
    """Load the YAML configuration at `path`.

    Raises FileNotFoundError when missing and ValueError when the content is
    not a YAML mapping.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError("invalid config format: parse error") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("invalid config format: expected mapping")
    return data


def setup(argv: Optional[Iterable[str]], config_path: Path) -> int:
    """High-level helper used by the application entrypoint.

    - With `--init`, writes the default template when the config is missing.
    - Loads the configuration into module state and returns 0.
    - A missing configuration returns 2 (unless $GAMESTORAGE_SKIP_SETUP is
      set, in which case defaults are used), a malformed one returns 1.
    """
    args = parse_args(argv)

    if args.init and write_template(config_path):
        print(f"Wrote template server config to {config_path}")

    try:
        cfg = load_server_config(config_path)
    except FileNotFoundError:
        if os.environ.get(SKIP_SETUP_ENV):
            cfg = default_template()
        else:
            print(
                "Server configuration missing. Run: `python3 gamestorage.py --init` to create the configuration template."
            )
            return 2
    except ValueError as e:
        print(f"Invalid server configuration {config_path}: {e}", file=sys.stderr)
        return 1

    _loaded_config.clear()
    _loaded_config.append(cfg)
    return 0
