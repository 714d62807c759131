"""
Binary location service.

Resolves the path of each managed tool (exiftool, go-vod, ffmpeg, ffprobe):
configured path first, then the bundled per-platform binary, then PATH.
Successful detections are memoized into the key/value store.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from sidecar.service.config import get_bin_dir, get_config_store
from sidecar.service.constants import (
    EXECUTABLE_MODE,
    EXIFTOOL_INTERPRETER,
    EXIFTOOL_SCRIPT,
    KEY_EXIFTOOL_NO_LOCAL,
    KEY_EXIFTOOL_PATH,
    KEY_VOD_FFMPEG,
    KEY_VOD_FFPROBE,
    KEY_VOD_PATH,
    TOOL_EXIFTOOL,
    TOOL_FFMPEG,
    TOOL_FFPROBE,
    TOOL_GOVOD,
)
from sidecar.service.platform_probe import detect_platform
from sidecar.service.runner import CommandRunner

SOURCE_CONFIGURED = 'configured'
SOURCE_BUNDLED_SCRIPT = 'bundled-script'
SOURCE_BUNDLED = 'bundled'
SOURCE_PATH = 'path'


@dataclass(frozen=True)
class ToolPolicy:
    """How a tool may be located"""

    tool: str
    config_key: str
    no_local_key: Optional[str] = None
    bundled: bool = False
    bundled_libc: bool = False
    path_lookup: bool = False
    # Re-detect when the configured path no longer exists on disk
    redetect_missing: bool = False


TOOL_POLICIES = {
    TOOL_EXIFTOOL: ToolPolicy(
        tool=TOOL_EXIFTOOL,
        config_key=KEY_EXIFTOOL_PATH,
        no_local_key=KEY_EXIFTOOL_NO_LOCAL,
        bundled=True,
        bundled_libc=True,
    ),
    TOOL_GOVOD: ToolPolicy(
        tool=TOOL_GOVOD,
        config_key=KEY_VOD_PATH,
        bundled=True,
        redetect_missing=True,
    ),
    TOOL_FFMPEG: ToolPolicy(
        tool=TOOL_FFMPEG,
        config_key=KEY_VOD_FFMPEG,
        path_lookup=True,
        redetect_missing=True,
    ),
    TOOL_FFPROBE: ToolPolicy(
        tool=TOOL_FFPROBE,
        config_key=KEY_VOD_FFPROBE,
        path_lookup=True,
        redetect_missing=True,
    ),
}


@dataclass(frozen=True)
class BinaryResolution:
    """Where a tool was found and how to invoke it"""

    tool: str
    source: str
    path: str
    command: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.command:
            object.__setattr__(self, 'command', [self.path])


def is_executable(path):
    """True if path is an existing file with the executable bit usable by us"""
    return bool(path) and os.path.isfile(path) and os.access(path, os.X_OK)


def try_repair_executable(path, logger=None):
    """
    Best-effort chmod 755 of path.

    Failures are not raised; the return value tells whether the file is
    executable afterwards and must be checked by the caller.

    Returns:
        bool: True if path is executable after the attempt
    """

    def log(message):
        if logger:
            logger(message)

    if not path or not os.path.exists(path):
        return False
    if os.access(path, os.X_OK):
        return True

    try:
        os.chmod(path, EXECUTABLE_MODE)
        log(f"Set mode 755 on {path}")
    except OSError as e:
        log(f"Could not chmod {path}: {e}")

    return os.access(path, os.X_OK)


def bundled_binary_name(tool, signature, with_libc=True):
    """
    Build the bundled binary file name for tool on this platform.

    Returns:
        str | None: '<tool>-<arch>-<libc>' or '<tool>-<arch>', None when the
        platform is not fully known
    """
    if not signature.known:
        return None
    name = f"{tool}-{signature.architecture.value}"
    if with_libc:
        name += f"-{signature.libc.value}"
    return name


def get_exiftool_script(bin_dir=None):
    """Path of the bundled exiftool perl script"""
    return os.path.join(bin_dir or get_bin_dir(), EXIFTOOL_SCRIPT)


def resolve_binary(tool, store=None, runner=None, signature=None, bin_dir=None, logger=None):
    """
    Resolve the binary for a managed tool, first success wins.

    1. A configured/memoized path (chmod repaired if needed, returned even if
       the repair failed)
    2. The interpreter + bundled script form, when the no-local flag is set
    3. The bundled binary for this platform, when architecture and libc are known
    4. A PATH lookup, for tools that allow it

    Args:
        tool: One of the TOOL_* names
        store: ConfigStore to read and memoize into (default: database store)
        runner: CommandRunner used for PATH lookup
        signature: PlatformSignature (default: detected host signature)
        bin_dir: Directory of bundled binaries (default: VODHOST_BIN_DIR)
        logger: Optional callable(str) for logging

    Returns:
        BinaryResolution | None: None when nothing usable was found; for
        exiftool this also records the no-local flag
    """

    def log(message):
        if logger:
            logger(message)

    policy = TOOL_POLICIES[tool]
    store = store or get_config_store()
    runner = runner or CommandRunner()
    bin_dir = bin_dir or get_bin_dir()

    # Step 1: configured or memoized path
    configured = store.get(policy.config_key)
    if configured:
        if os.path.exists(configured):
            if not os.access(configured, os.X_OK):
                try_repair_executable(configured, logger=logger)
            log(f"{tool}: using configured path {configured}")
            return BinaryResolution(tool=tool, source=SOURCE_CONFIGURED, path=configured)
        if not policy.redetect_missing:
            log(f"{tool}: using configured path {configured} (does not exist)")
            return BinaryResolution(tool=tool, source=SOURCE_CONFIGURED, path=configured)
        log(f"{tool}: configured path {configured} does not exist, detecting")

    # Step 2: no native binary expected on this host
    if policy.no_local_key and store.get(policy.no_local_key):
        script = get_exiftool_script(bin_dir)
        log(f"{tool}: using bundled script {script}")
        return BinaryResolution(
            tool=tool,
            source=SOURCE_BUNDLED_SCRIPT,
            path=script,
            command=[EXIFTOOL_INTERPRETER, script],
        )

    # Step 3: bundled binary for this platform
    if policy.bundled:
        signature = signature or detect_platform()
        name = bundled_binary_name(tool, signature, with_libc=policy.bundled_libc)
        if name is None:
            log(f"{tool}: platform {signature} unknown, skipping bundled binary")
        else:
            path = os.path.realpath(os.path.join(bin_dir, name))
            if os.path.isfile(path):
                if not os.access(path, os.X_OK):
                    try_repair_executable(path, logger=logger)
                store.set(policy.config_key, path)
                log(f"{tool}: using bundled binary {path}")
                return BinaryResolution(tool=tool, source=SOURCE_BUNDLED, path=path)
            log(f"{tool}: bundled binary {path} not found")

    # Step 4: system PATH
    if policy.path_lookup:
        path = runner.which(tool)
        if path:
            path = path.strip()
            store.set(policy.config_key, path)
            log(f"{tool}: found on PATH at {path}")
            return BinaryResolution(tool=tool, source=SOURCE_PATH, path=path)
        log(f"{tool}: not found on PATH")

    # Step 5: nothing usable
    if policy.no_local_key:
        store.set(policy.no_local_key, True)
        log(f"{tool}: no local binary usable, falling back to bundled script")

    return None


def detect_exiftool(store=None, runner=None, signature=None, bin_dir=None, logger=None):
    """
    Detect the exiftool binary to use.

    Returns:
        BinaryResolution | None
    """
    return resolve_binary(
        TOOL_EXIFTOOL, store=store, runner=runner, signature=signature, bin_dir=bin_dir, logger=logger
    )


def get_exiftool(store=None, runner=None, signature=None, bin_dir=None, logger=None):
    """
    Get the argv prefix used to invoke exiftool.

    Returns:
        list[str]: e.g. ['/app/bin-ext/exiftool-amd64-glibc'] or
        ['perl', '/app/bin-ext/exiftool/exiftool']
    """
    store = store or get_config_store()
    resolution = detect_exiftool(
        store=store, runner=runner, signature=signature, bin_dir=bin_dir, logger=logger
    )
    if resolution is None:
        # The no-local flag is now set, so this yields the bundled script form
        resolution = detect_exiftool(
            store=store, runner=runner, signature=signature, bin_dir=bin_dir, logger=logger
        )
    return list(resolution.command)


def detect_govod(store=None, runner=None, signature=None, bin_dir=None, logger=None):
    """
    Detect the go-vod binary to use.

    Returns:
        str | None: Path to go-vod
    """
    resolution = resolve_binary(
        TOOL_GOVOD, store=store, runner=runner, signature=signature, bin_dir=bin_dir, logger=logger
    )
    return resolution.path if resolution else None


def detect_ffmpeg(store=None, runner=None, logger=None):
    """
    Detect ffmpeg and ffprobe; both must be found and executable.

    Returns:
        tuple[str, str] | None: (ffmpeg path, ffprobe path)
    """

    def log(message):
        if logger:
            logger(message)

    store = store or get_config_store()
    ffmpeg = resolve_binary(TOOL_FFMPEG, store=store, runner=runner, logger=logger)
    ffprobe = resolve_binary(TOOL_FFPROBE, store=store, runner=runner, logger=logger)
    if ffmpeg is None or ffprobe is None:
        return None

    for resolution in (ffmpeg, ffprobe):
        if not is_executable(resolution.path):
            log(f"{resolution.tool} at {resolution.path} is not executable")
            return None

    return ffmpeg.path, ffprobe.path
