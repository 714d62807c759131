"""
go-vod configuration builder.

Builds the JSON payload go-vod reads from its config file (local mode) or
receives on its config endpoint (external mode), and the URLs used to talk
to it.
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from sidecar.service.config import get_config_store
from sidecar.service.constants import (
    KEY_INSTANCE_ID,
    KEY_VOD_BIND,
    KEY_VOD_CONNECT,
    KEY_VOD_NVENC,
    KEY_VOD_NVENC_SCALE,
    KEY_VOD_NVENC_TEMPORAL_AQ,
    KEY_VOD_TEMPDIR,
    KEY_VOD_VAAPI,
    KEY_VOD_VAAPI_LOW_POWER,
    TOOL_FFMPEG,
    TOOL_FFPROBE,
)
from sidecar.service.locator import resolve_binary


@dataclass
class GoVodConfig:
    """Configuration sent to go-vod"""

    # Hardware acceleration flags, passed through untouched
    vaapi: Any = None
    vaapi_low_power: Any = None
    nvenc: Any = None
    nvenc_temporal_aq: Any = None
    nvenc_scale: Any = None

    # Local-only fields
    local: bool = False
    bind: Optional[str] = None
    ffmpeg: Optional[str] = None
    ffprobe: Optional[str] = None
    tempdir: Optional[str] = None

    def as_payload(self):
        """
        Serialize to go-vod's JSON keys.

        The remote variant never contains bind/ffmpeg/ffprobe/tempdir: paths on
        this host mean nothing to a go-vod running elsewhere.
        """
        payload = {
            'vaapi': self.vaapi,
            'vaapiLowPower': self.vaapi_low_power,
            'nvenc': self.nvenc,
            'nvencTemporalAQ': self.nvenc_temporal_aq,
            'nvencScale': self.nvenc_scale,
        }
        if self.local:
            payload.update({
                'bind': self.bind,
                'ffmpeg': self.ffmpeg,
                'ffprobe': self.ffprobe,
                'tempdir': self.tempdir,
            })
        return payload


def normalize_dir(path):
    """Ensure path ends with exactly one '/'"""
    return path.rstrip('/') + '/'


def get_govod_tempdir(store=None):
    """
    Get the per-instance go-vod working directory.

    '<vod.tempdir>/<instanceid>', without a trailing separator so that
    '<tempdir>.json' and '<tempdir>.log' sit next to it.
    """
    store = store or get_config_store()
    base = store.get(KEY_VOD_TEMPDIR) or os.path.join(tempfile.gettempdir(), 'go-vod')
    base = normalize_dir(str(base))
    instance_id = store.get(KEY_INSTANCE_ID, 'default')
    return f"{base}{instance_id}"


def build_govod_config(local=False, store=None, runner=None, logger=None):
    """
    Build the go-vod configuration from the key/value store.

    Args:
        local: Include bind address, binary paths and tempdir for a go-vod
               launched on this host
        store: ConfigStore (default: database store)
        runner: CommandRunner used to locate ffmpeg/ffprobe
        logger: Optional callable(str) for logging

    Returns:
        GoVodConfig
    """
    store = store or get_config_store()

    config = GoVodConfig(
        vaapi=store.get(KEY_VOD_VAAPI),
        vaapi_low_power=store.get(KEY_VOD_VAAPI_LOW_POWER),
        nvenc=store.get(KEY_VOD_NVENC, False),
        nvenc_temporal_aq=store.get(KEY_VOD_NVENC_TEMPORAL_AQ),
        nvenc_scale=store.get(KEY_VOD_NVENC_SCALE),
    )

    if not local:
        return config

    ffmpeg = resolve_binary(TOOL_FFMPEG, store=store, runner=runner, logger=logger)
    ffprobe = resolve_binary(TOOL_FFPROBE, store=store, runner=runner, logger=logger)

    config.local = True
    config.bind = store.get(KEY_VOD_BIND)
    config.ffmpeg = ffmpeg.path if ffmpeg else None
    config.ffprobe = ffprobe.path if ffprobe else None
    config.tempdir = get_govod_tempdir(store)
    return config


def get_govod_url(client, path, profile, store=None):
    """
    Build a go-vod URL.

    Returns:
        str: 'http://<connect>/<client>/<percent-encoded path>/<profile>',
        where connect defaults to the bind address
    """
    store = store or get_config_store()
    bind = store.get(KEY_VOD_BIND)
    connect = store.get(KEY_VOD_CONNECT, bind)
    return f"http://{connect}/{client}/{quote(str(path), safe='')}/{profile}"
