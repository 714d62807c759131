"""
go-vod lifecycle entrypoint.

"Make go-vod usable": probe it, and on failure reconfigure (external) or
restart (local) exactly once before probing again.
"""

from sidecar.service.config import get_config_store
from sidecar.service.constants import KEY_VOD_EXTERNAL
from sidecar.service.errors import SidecarError
from sidecar.service.health import configure_govod, check_govod
from sidecar.service.supervisor import restart_govod


def is_external(store=None):
    """True if go-vod is managed outside this host's launch control"""
    store = store or get_config_store()
    return bool(store.get(KEY_VOD_EXTERNAL))


def start_govod(store=None, runner=None, logger=None):
    """
    If local, restart the go-vod process.
    If external, push a fresh configuration to it.

    Returns:
        str | None: Log file path for a local restart, None for external
    """
    store = store or get_config_store()

    if is_external(store):
        configure_govod(store=store, logger=logger)
        return None

    return restart_govod(store=store, runner=runner, logger=logger)


def ensure_govod(store=None, runner=None, logger=None):
    """
    Test go-vod and (re)start it once if the test fails.

    A second failure is raised to the caller and never retried.

    Returns:
        str: The go-vod version reported by the successful probe

    Raises:
        SidecarError: The probe after the restart failed, or the restart
                      itself failed
    """

    def log(message):
        if logger:
            logger(message)

    store = store or get_config_store()

    try:
        return check_govod(store=store, logger=logger)
    except SidecarError as e:
        log(f"go-vod check failed: {e}")

    log('Attempting to (re)start go-vod')
    start_govod(store=store, runner=runner, logger=logger)

    return check_govod(store=store, logger=logger)
