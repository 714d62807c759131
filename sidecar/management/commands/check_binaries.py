"""
Django management command to show binary detection and check exiftool.

Usage:
    ./manage.py check_binaries
    ./manage.py check_binaries --reset   # forget memoized paths and detect again
"""

from django.core.management.base import BaseCommand

from sidecar.service.config import get_bin_dir, get_config_store, get_exiftool_version
from sidecar.service.constants import MEMOIZED_BINARY_KEYS, TOOL_FFMPEG, TOOL_FFPROBE
from sidecar.service.errors import SidecarError
from sidecar.service.health import check_exiftool
from sidecar.service.locator import detect_exiftool, detect_govod, resolve_binary
from sidecar.service.platform_probe import detect_platform


class Command(BaseCommand):
    help = 'Show detected exiftool/go-vod/ffmpeg binaries and check the exiftool version'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Clear memoized binary paths before detecting'
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Enable verbose output'
        )

    def handle(self, *args, **options):
        store = get_config_store()
        logger = self.stdout.write if options['verbose'] else None

        if options['reset']:
            for key in MEMOIZED_BINARY_KEYS:
                store.set(key, None)
            self.stdout.write(self.style.WARNING('Cleared memoized binary paths'))

        signature = detect_platform()

        self.stdout.write('\n=== Platform ===\n')
        self.stdout.write(f"Platform: {signature}")
        self.stdout.write(f"Bundled binaries: {get_bin_dir()}")
        if not signature.known:
            self.stdout.write(self.style.WARNING('Platform not fully detected; bundled binaries disabled'))

        self.stdout.write('\n=== Binaries ===\n')

        exiftool = detect_exiftool(store=store, signature=signature, logger=logger)
        if exiftool:
            self.stdout.write(f"exiftool: {' '.join(exiftool.command)} ({exiftool.source})")
        else:
            self.stdout.write(self.style.WARNING('exiftool: no local binary, using bundled perl script'))

        govod = detect_govod(store=store, signature=signature, logger=logger)
        if govod:
            self.stdout.write(f"go-vod: {govod}")
        else:
            self.stdout.write(self.style.ERROR('go-vod: not found'))

        for tool in (TOOL_FFMPEG, TOOL_FFPROBE):
            resolution = resolve_binary(tool, store=store, logger=logger)
            if resolution:
                self.stdout.write(f"{tool}: {resolution.path} ({resolution.source})")
            else:
                self.stdout.write(self.style.ERROR(f"{tool}: not found"))

        self.stdout.write('\n=== exiftool ===\n')
        self.stdout.write(f"Required version: {get_exiftool_version()}")

        try:
            version = check_exiftool(store=store, logger=logger)
            self.stdout.write(self.style.SUCCESS(f"exiftool is working (version {version})"))
        except SidecarError as e:
            self.stdout.write(self.style.ERROR(f"exiftool check failed: {e}"))

        self.stdout.write('')
