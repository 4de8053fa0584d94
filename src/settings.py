"""shared paths, environment loading and logging setup"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

THIS_DIR = Path(__file__).resolve().parent


def detect_project_root() -> Path:
    """detect project root by walking upward for a pyproject marker"""
    for candidate in [THIS_DIR, *THIS_DIR.parents]:
        if (candidate / "pyproject.toml").exists():
            return candidate
    return THIS_DIR.parent


PROJECT_ROOT = detect_project_root()

# load .env or env from project root without clobbering the real environment
for _env_name in (".env", "env"):
    _env_path = PROJECT_ROOT / _env_name
    if _env_path.exists():
        load_dotenv(dotenv_path=str(_env_path), override=False)
        break

SOURCE_DIR = Path(os.getenv("GOV_SOURCE_DIR")
                  or PROJECT_ROOT / "public" / "new_data")
DATA_DIR = Path(os.getenv("GOV_DATA_DIR") or PROJECT_ROOT / "public" / "data")

CATEGORY_FILE_NAME = "proposal_categories_enhanced.csv"
PROPOSALS_SUFFIX = "_proposals.csv"

DEFAULT_API_PORT = 8000


def read_port(raw: Optional[str], default: int = DEFAULT_API_PORT) -> int:
    """parse a port from the environment, warning and falling back when it is not a number"""
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid GOV_API_PORT value {raw!r}; using {default}")
        return default


API_HOST = os.getenv("GOV_API_HOST", "127.0.0.1")
API_PORT = read_port(os.getenv("GOV_API_PORT"))


def resolve_dir(override: Optional[str], default: Path) -> Path:
    """return the cli override as a path or fall back to the default"""
    if override:
        return Path(override).expanduser().resolve()
    return default


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    # default INFO; --verbose -> DEBUG; --quiet -> ERROR
    if verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.ERROR
    else:
        log_level = logging.INFO
    logging.basicConfig(
        level=log_level,
        format='[%(levelname)s] %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
