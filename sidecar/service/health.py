"""
Version-gated health checks.

exiftool is checked through its own '-ver' output, go-vod through its HTTP
endpoint. Versions must equal the pin exactly.
"""

import requests

from sidecar.service.config import (
    get_config_store,
    get_exiftool_version,
    get_govod_version,
    get_http_timeout,
    get_probe_file,
)
from sidecar.service.constants import (
    GOVOD_CONFIG_CLIENT,
    GOVOD_CONFIG_PATH,
    GOVOD_CONFIG_PROFILE,
    GOVOD_TEST_CLIENT,
    GOVOD_TEST_PROFILE,
    TOOL_EXIFTOOL,
    TOOL_GOVOD,
)
from sidecar.service.errors import (
    ExiftoolError,
    ResponseParseError,
    SidecarUnreachable,
    VersionMismatch,
)
from sidecar.service.locator import get_exiftool
from sidecar.service.runner import CommandRunner
from sidecar.service.vod_config import build_govod_config, get_govod_url


def match_version(version, target, tool=None):
    """
    Compare a reported version to the pin.

    Raises:
        VersionMismatch: Anything other than an exact match, newer included
    """
    version = str(version).strip() if version is not None else ''
    if version != target:
        raise VersionMismatch(version, target, tool=tool)
    return version


def check_exiftool(store=None, runner=None, logger=None):
    """
    Run exiftool -ver and compare it to the pinned version.

    Returns:
        str: The reported version

    Raises:
        ExiftoolError: exiftool exited non-zero or printed nothing on stdout
        VersionMismatch: exiftool is not the pinned version
    """

    def log(message):
        if logger:
            logger(message)

    runner = runner or CommandRunner()
    command = get_exiftool(store=store, runner=runner, logger=logger) + ['-ver']
    log(f"Running: {' '.join(command)}")

    output, code = runner.run(command, merge_stderr=False)
    if code != 0 or not output or not output.strip():
        raise ExiftoolError(command, code)

    return match_version(output, get_exiftool_version(), tool=TOOL_EXIFTOOL)


def check_govod(store=None, logger=None):
    """
    Probe the running go-vod and compare its version to the pin.

    Sends GET /test/<probe file>/test; go-vod answers with a JSON object
    carrying its version.

    Returns:
        str: The reported version

    Raises:
        SidecarUnreachable: Connection refused, timeout or error status
        ResponseParseError: Body is not a JSON object
        VersionMismatch: go-vod is not the pinned version
    """

    def log(message):
        if logger:
            logger(message)

    url = get_govod_url(GOVOD_TEST_CLIENT, get_probe_file(), GOVOD_TEST_PROFILE, store=store)
    log(f"Probing go-vod: {url}")

    try:
        response = requests.get(url, timeout=get_http_timeout())
        response.raise_for_status()
    except requests.RequestException as e:
        raise SidecarUnreachable(url, e) from e

    try:
        data = response.json()
    except ValueError as e:
        raise ResponseParseError(url) from e

    if not data or not isinstance(data, dict):
        raise ResponseParseError(url)

    version = match_version(data.get('version'), get_govod_version(), tool=TOOL_GOVOD)
    log(f"go-vod version {version}")
    return version


def configure_govod(store=None, logger=None):
    """
    POST a fresh configuration to an externally managed go-vod.

    Only the remote variant of the config is sent.

    Raises:
        SidecarUnreachable: Connection refused, timeout or error status
    """

    def log(message):
        if logger:
            logger(message)

    config = build_govod_config(local=False, store=store, logger=logger)
    url = get_govod_url(GOVOD_CONFIG_CLIENT, GOVOD_CONFIG_PATH, GOVOD_CONFIG_PROFILE, store=store)
    log(f"Configuring go-vod: {url}")

    try:
        response = requests.post(url, json=config.as_payload(), timeout=get_http_timeout())
        response.raise_for_status()
    except requests.RequestException as e:
        raise SidecarUnreachable(url, e) from e

    return True
