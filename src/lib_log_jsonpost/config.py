"""Optional ``.env`` support for CLI and host configuration.

``LOG_JSONPOST_*`` variables can live in a ``.env`` file next to (or above)
the working directory. Loading is opt-in via ``--use-dotenv`` or the
:data:`DOTENV_ENV_VAR` toggle, and real environment variables always win.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DOTENV_ENV_VAR = "LIB_LOG_JSONPOST_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}
_LOCK = threading.Lock()
_LOADED_PATH: Path | None = None
_ATTEMPTED = False


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` loading is requested.

    An explicit CLI choice wins over the environment toggle.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` file without overriding existing variables.

    The search walks upwards from ``search_from`` (default: the current
    working directory). Subsequent calls reuse the first result.

    Returns
    -------
    Path | None
        Resolved path of the loaded file, or ``None`` when none was found.
    """

    global _LOADED_PATH, _ATTEMPTED
    with _LOCK:
        if _ATTEMPTED:
            return _LOADED_PATH
        _ATTEMPTED = True
        if search_from is None:
            candidate = find_dotenv(usecwd=True)
        else:
            candidate = _find_upwards(search_from)
        if not candidate:
            logger.debug("No .env file found")
            return None
        path = Path(candidate).resolve()
        load_dotenv(path, override=False)
        logger.debug("Loaded environment from %s", path)
        _LOADED_PATH = path
        return path


def _find_upwards(start: Path) -> str:
    for directory in (start.resolve(), *start.resolve().parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return str(candidate)
    return ""


def _reset_dotenv_state_for_testing() -> None:
    global _LOADED_PATH, _ATTEMPTED
    with _LOCK:
        _LOADED_PATH = None
        _ATTEMPTED = False


__all__ = ["DOTENV_ENV_VAR", "enable_dotenv", "should_use_dotenv"]
