"""
Sidecar supervision errors.

Every failure carries the concrete path or URL involved so the message can be
shown to an operator as-is.
"""


class SidecarError(Exception):
    """Base class for all supervisor failures"""

    pass


class ConfigurationError(SidecarError):
    """Raised when a required setting is absent"""

    pass


class BinaryNotFoundError(SidecarError):
    """Raised when an expected binary or file does not exist"""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class BinaryPermissionError(SidecarError):
    """Raised when a binary exists but cannot be made executable"""

    def __init__(self, path: str):
        super().__init__(f"Transcoder not executable (chmod 755 {path})")
        self.path = path


class TempDirError(SidecarError):
    """Raised when the go-vod working directory cannot be (re)created or written"""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class SidecarUnreachable(SidecarError):
    """Raised on a network-level failure talking to go-vod"""

    def __init__(self, url: str, reason):
        super().__init__(f"failed to connect to go-vod at {url}: {reason}")
        self.url = url
        self.reason = reason


class ResponseParseError(SidecarError):
    """Raised when go-vod answers with a body that is not a JSON object"""

    def __init__(self, url: str):
        super().__init__(f"failed to parse go-vod response from {url}")
        self.url = url


class VersionMismatch(SidecarError):
    """
    Raised when a tool reports a version other than the pinned one.

    Both newer and older versions are rejected.
    """

    def __init__(self, got: str, want: str, tool: str = None):
        prefix = f"{tool} " if tool else ''
        super().__init__(f"{prefix}version does not match {got} <==> {want}")
        self.got = got
        self.want = want
        self.tool = tool


class ExiftoolError(SidecarError):
    """Raised when exiftool fails or prints no version"""

    def __init__(self, command, exit_code=None):
        message = f"failed to run exiftool ({' '.join(command)})"
        if exit_code:
            message += f" [exit code {exit_code}]"
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class LaunchError(SidecarError):
    """Raised when the go-vod process cannot be started"""

    def __init__(self, path: str, log_path: str, reason):
        super().__init__(f"failed to launch go-vod ({path}, log {log_path}): {reason}")
        self.path = path
        self.log_path = log_path
        self.reason = reason
