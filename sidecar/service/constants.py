"""
Sidecar constants.

Centralized definitions of tool names, key/value setting names and the
go-vod protocol sentinels.
"""

# Managed tools
TOOL_EXIFTOOL = 'exiftool'
TOOL_GOVOD = 'go-vod'
TOOL_FFMPEG = 'ffmpeg'
TOOL_FFPROBE = 'ffprobe'

# Key/value setting names
KEY_INSTANCE_ID = 'instanceid'

KEY_EXIFTOOL_PATH = 'exiftool.path'
KEY_EXIFTOOL_NO_LOCAL = 'exiftool.no_local'

KEY_VOD_PATH = 'vod.path'
KEY_VOD_EXTERNAL = 'vod.external'
KEY_VOD_BIND = 'vod.bind'
KEY_VOD_CONNECT = 'vod.connect'
KEY_VOD_FFMPEG = 'vod.ffmpeg'
KEY_VOD_FFPROBE = 'vod.ffprobe'
KEY_VOD_TEMPDIR = 'vod.tempdir'

KEY_VOD_VAAPI = 'vod.vaapi'
KEY_VOD_VAAPI_LOW_POWER = 'vod.vaapi.low_power'
KEY_VOD_NVENC = 'vod.nvenc'
KEY_VOD_NVENC_TEMPORAL_AQ = 'vod.nvenc.temporal_aq'
KEY_VOD_NVENC_SCALE = 'vod.nvenc.scale'

# Keys written by binary detection; clearing them forces re-detection
MEMOIZED_BINARY_KEYS = [
    KEY_EXIFTOOL_PATH,
    KEY_EXIFTOOL_NO_LOCAL,
    KEY_VOD_PATH,
    KEY_VOD_FFMPEG,
    KEY_VOD_FFPROBE,
]

# Interpreter and script used when no native exiftool is usable
EXIFTOOL_INTERPRETER = 'perl'
EXIFTOOL_SCRIPT = 'exiftool/exiftool'

# go-vod client/profile sentinels
GOVOD_TEST_CLIENT = 'test'
GOVOD_TEST_PROFILE = 'test'
GOVOD_CONFIG_CLIENT = 'config'
GOVOD_CONFIG_PATH = 'config'
GOVOD_CONFIG_PROFILE = 'config'

EXECUTABLE_MODE = 0o755
