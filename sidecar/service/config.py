"""
Configuration adapter for sidecar supervision.

Centralizes access to Django settings (deployment-level values) and to the
key/value store that binary detection reads and memoizes into.
"""

import os

from django.conf import settings


def get_bin_dir():
    """Get the directory holding the bundled binaries"""
    return settings.VODHOST_BIN_DIR


def get_probe_file():
    """Get the resolved path of the local media file used as the go-vod health probe"""
    return os.path.realpath(settings.VODHOST_PROBE_FILE)


def get_exiftool_version():
    """Get the pinned exiftool version"""
    return settings.VODHOST_EXIFTOOL_VERSION


def get_govod_version():
    """Get the pinned go-vod version"""
    return settings.VODHOST_GOVOD_VERSION


def get_settle_seconds():
    """Get the blocking delay applied after launching go-vod"""
    return settings.VODHOST_GOVOD_SETTLE_SECONDS


def get_http_timeout():
    """Get the timeout for HTTP calls to go-vod"""
    return settings.VODHOST_HTTP_TIMEOUT


def get_config_default(key):
    """Get the deployment default for a key/value setting, or None"""
    return getattr(settings, 'VODHOST_CONFIG_DEFAULTS', {}).get(key)


class ConfigStore:
    """
    Key/value configuration repository.

    Lookup order for get(): stored value, then the caller's default,
    then VODHOST_CONFIG_DEFAULTS. Setting a key to None removes it.
    """

    def get(self, key, default=None):
        value = self._load(key)
        if value is not None:
            return value
        if default is not None:
            return default
        return get_config_default(key)

    def set(self, key, value):
        if value is None:
            self._delete(key)
        else:
            self._save(key, value)

    def _load(self, key):
        raise NotImplementedError

    def _save(self, key, value):
        raise NotImplementedError

    def _delete(self, key):
        raise NotImplementedError


class DatabaseConfigStore(ConfigStore):
    """Config store persisted in the SystemSetting table"""

    def _load(self, key):
        from sidecar.models import SystemSetting

        row = SystemSetting.objects.filter(key=key).first()
        return row.value if row else None

    def _save(self, key, value):
        from sidecar.models import SystemSetting

        SystemSetting.objects.update_or_create(key=key, defaults={'value': value})

    def _delete(self, key):
        from sidecar.models import SystemSetting

        SystemSetting.objects.filter(key=key).delete()


class MemoryConfigStore(ConfigStore):
    """Config store kept in a dict, for tests and one-off scripts"""

    def __init__(self, initial=None):
        self.values = dict(initial or {})

    def _load(self, key):
        return self.values.get(key)

    def _save(self, key, value):
        self.values[key] = value

    def _delete(self, key):
        self.values.pop(key, None)


def get_config_store():
    """Get the default (database-backed) config store"""
    return DatabaseConfigStore()
