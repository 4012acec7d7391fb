import os
import sys
import pytest


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()


@pytest.fixture(autouse=True)
def _clear_spotify_env():
    """Ensure Spotify credentials and espotifai settings do not leak across tests.
    A developer .env may set these variables; clear before each test
    and restore afterwards so tests explicitly setting them remain deterministic.
    """
    keys = [
        'SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET',
        'ESPOTIFAI_SEARCH_LIMIT', 'ESPOTIFAI_MARKET', 'ESPOTIFAI_TIMEOUT', 'ESPOTIFAI_PLAYLISTS_FILE',
    ]
    backup = {k: os.environ.get(k) for k in keys}
    for k in keys:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def _reset_espotifai_logger():
    """Drop handlers installed by setup_logging so they never outlive a captured stream."""
    import logging

    logger = logging.getLogger('espotifai')
    level = logger.level
    try:
        yield
    finally:
        logger.handlers.clear()
        logger.setLevel(level)
