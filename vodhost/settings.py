"""
Django settings for vodhost project.

Deployment-level values are read from the environment. Runtime state that the
supervisor detects and memoizes (binary paths, flags) lives in the database
key/value store instead, see sidecar.service.config.
"""

import os
import tempfile
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-vodhost-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'sidecar',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'vodhost.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'vodhost.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('VODHOST_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Sidecar supervision

# Directory holding the bundled per-platform binaries
# (exiftool-<arch>-<libc>, go-vod-<arch>, exiftool/exiftool perl script)
VODHOST_BIN_DIR = os.environ.get('VODHOST_BIN_DIR', str(BASE_DIR / 'bin-ext'))

# Local media file whose resolved path is sent to go-vod as a connectivity/version
# probe; must exist on hosts that run go-vod locally
VODHOST_PROBE_FILE = os.environ.get(
    'VODHOST_PROBE_FILE', str(BASE_DIR / 'sidecar' / 'exiftest.jpg')
)

# Pinned versions; any drift in either direction is rejected
VODHOST_EXIFTOOL_VERSION = os.environ.get('VODHOST_EXIFTOOL_VERSION', '12.58')
VODHOST_GOVOD_VERSION = os.environ.get('VODHOST_GOVOD_VERSION', '0.0.34')

# Blocking delay after launching go-vod so it can bind its socket
VODHOST_GOVOD_SETTLE_SECONDS = float(os.environ.get('VODHOST_GOVOD_SETTLE_SECONDS', '0.5'))

# Timeout in seconds for HTTP calls to go-vod
VODHOST_HTTP_TIMEOUT = float(os.environ.get('VODHOST_HTTP_TIMEOUT', '10'))

# Defaults for the key/value store when a key has never been set
VODHOST_CONFIG_DEFAULTS = {
    'instanceid': os.environ.get('VODHOST_INSTANCE_ID', 'default'),
    'vod.bind': os.environ.get('VODHOST_VOD_BIND', '127.0.0.1:47788'),
    'vod.tempdir': os.environ.get(
        'VODHOST_VOD_TEMPDIR', os.path.join(tempfile.gettempdir(), 'go-vod') + '/'
    ),
    'vod.external': False,
    'vod.vaapi': False,
    'vod.vaapi.low_power': False,
    'vod.nvenc': False,
    'vod.nvenc.temporal_aq': False,
    'vod.nvenc.scale': 'npp',
    'exiftool.no_local': False,
}
