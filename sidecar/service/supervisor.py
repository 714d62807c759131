"""
Local go-vod process supervision.

Writes go-vod's config file, recreates its working directory, kills any
stale instance and launches a fresh detached one.
"""

import json
import os
import shutil
import time

from sidecar.service.config import get_config_store, get_settle_seconds
from sidecar.service.constants import EXECUTABLE_MODE, KEY_VOD_PATH
from sidecar.service.errors import (
    BinaryNotFoundError,
    BinaryPermissionError,
    ConfigurationError,
    LaunchError,
    TempDirError,
)
from sidecar.service.locator import try_repair_executable
from sidecar.service.runner import CommandRunner
from sidecar.service.vod_config import build_govod_config


def get_transcoder_path(store=None, logger=None):
    """
    Get the configured go-vod path, made executable.

    Raises:
        ConfigurationError: No transcoder path configured
        BinaryNotFoundError: Configured path does not exist
        BinaryPermissionError: Path exists but cannot be made executable
    """
    store = store or get_config_store()

    transcoder = store.get(KEY_VOD_PATH)
    if not transcoder:
        raise ConfigurationError('Transcoder not configured')

    if not os.path.exists(transcoder):
        raise BinaryNotFoundError(f"Transcoder not found; ({transcoder})", path=transcoder)

    if not os.access(transcoder, os.X_OK):
        if not try_repair_executable(transcoder, logger=logger):
            raise BinaryPermissionError(transcoder)

    return transcoder


def prepare_tempdir(tmp_path, logger=None):
    """
    Destroy and recreate the go-vod working directory with mode 755.

    Raises:
        TempDirError: Directory could not be created or is not writable
    """

    def log(message):
        if logger:
            logger(message)

    shutil.rmtree(tmp_path, ignore_errors=True)
    try:
        os.makedirs(tmp_path, exist_ok=True)
        os.chmod(tmp_path, EXECUTABLE_MODE)
    except OSError as e:
        log(f"Could not create {tmp_path}: {e}")

    if not os.path.isdir(tmp_path):
        raise TempDirError(f"Temp directory could not be created ({tmp_path})", path=tmp_path)

    if not os.access(tmp_path, os.W_OK):
        raise TempDirError(f"Temp directory is not writable ({tmp_path})", path=tmp_path)

    log(f"Recreated temp directory {tmp_path}")


def restart_govod(store=None, runner=None, logger=None, settle_seconds=None):
    """
    (Re)start the local go-vod process.

    Steps:
    1. Resolve and verify the transcoder binary
    2. Build the local config
    3. Recreate the working directory
    4. Write '<tempdir>.json'
    5. Kill any running go-vod with the same binary path
    6. Launch go-vod detached, appending output to '<tempdir>.log'
    7. Sleep for the settling delay

    There is no retry here; see orchestrator.ensure_govod.

    Args:
        store: ConfigStore (default: database store)
        runner: CommandRunner (default: subprocess-backed)
        logger: Optional callable(str) for logging
        settle_seconds: Override for VODHOST_GOVOD_SETTLE_SECONDS

    Returns:
        str: Path to the go-vod log file

    Raises:
        LaunchError: The transcoder or its log file could not be opened
    """

    def log(message):
        if logger:
            logger(message)

    store = store or get_config_store()
    runner = runner or CommandRunner()

    transcoder = get_transcoder_path(store=store, logger=logger)
    log(f"Transcoder: {transcoder}")

    config = build_govod_config(local=True, store=store, runner=runner, logger=logger)
    tmp_path = config.tempdir

    prepare_tempdir(tmp_path, logger=logger)

    log_file = f"{tmp_path}.log"
    config_file = f"{tmp_path}.json"
    with open(config_file, 'w') as f:
        json.dump(config.as_payload(), f, indent=4)
    log(f"Wrote config: {config_file}")

    if runner.kill_by_path(transcoder):
        log(f"Killed running instance of {transcoder}")

    try:
        runner.spawn_detached([transcoder, config_file], log_file)
    except OSError as e:
        raise LaunchError(transcoder, log_file, e) from e
    log(f"Started {transcoder}, logging to {log_file}")

    if settle_seconds is None:
        settle_seconds = get_settle_seconds()
    time.sleep(settle_seconds)

    return log_file
