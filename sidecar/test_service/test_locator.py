"""
Tests for service/locator.py
"""

import os
import stat
import tempfile
from pathlib import Path
from unittest.mock import patch

from django.test import SimpleTestCase

from sidecar.service.config import MemoryConfigStore
from sidecar.service.constants import (
    KEY_EXIFTOOL_NO_LOCAL,
    KEY_EXIFTOOL_PATH,
    KEY_VOD_FFMPEG,
    KEY_VOD_FFPROBE,
    KEY_VOD_PATH,
    TOOL_EXIFTOOL,
    TOOL_FFMPEG,
    TOOL_GOVOD,
)
from sidecar.service.locator import (
    SOURCE_BUNDLED,
    SOURCE_BUNDLED_SCRIPT,
    SOURCE_CONFIGURED,
    SOURCE_PATH,
    bundled_binary_name,
    detect_exiftool,
    detect_ffmpeg,
    detect_govod,
    get_exiftool,
    is_executable,
    resolve_binary,
    try_repair_executable,
)
from sidecar.service.platform_probe import Architecture, LibcFamily, PlatformSignature
from sidecar.test_service.fakes import FakeRunner

AMD64_GLIBC = PlatformSignature(Architecture.AMD64, LibcFamily.GLIBC)
UNKNOWN_LIBC = PlatformSignature(Architecture.AMD64, None)
UNKNOWN_ARCH = PlatformSignature(None, LibcFamily.MUSL)


def make_file(path, mode=0o644):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b'#!/bin/sh\n')
    os.chmod(path, mode)
    return str(path)


class BundledNameTest(SimpleTestCase):
    """Tests for bundled binary naming"""

    def test_with_libc(self):
        self.assertEqual(bundled_binary_name('exiftool', AMD64_GLIBC), 'exiftool-amd64-glibc')

    def test_without_libc(self):
        self.assertEqual(
            bundled_binary_name('go-vod', AMD64_GLIBC, with_libc=False), 'go-vod-amd64'
        )

    def test_unknown_platform(self):
        self.assertIsNone(bundled_binary_name('exiftool', UNKNOWN_LIBC))
        self.assertIsNone(bundled_binary_name('go-vod', UNKNOWN_ARCH, with_libc=False))


class RepairExecutableTest(SimpleTestCase):
    """Tests for best-effort permission repair"""

    def test_repairs_mode(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = make_file(Path(temp_dir) / 'go-vod')

            self.assertTrue(try_repair_executable(path))
            self.assertEqual(stat.S_IMODE(os.stat(path).st_mode), 0o755)

    def test_missing_file(self):
        self.assertFalse(try_repair_executable('/nonexistent/go-vod'))
        self.assertFalse(try_repair_executable(None))

    def test_chmod_failure_is_swallowed(self):
        """Test a failed chmod is reported through the return value only"""
        logs = []

        with tempfile.TemporaryDirectory() as temp_dir:
            path = make_file(Path(temp_dir) / 'go-vod')

            with patch('sidecar.service.locator.os.chmod') as mock_chmod:
                mock_chmod.side_effect = PermissionError('read-only filesystem')
                self.assertFalse(try_repair_executable(path, logger=logs.append))

        self.assertTrue(any('Could not chmod' in log for log in logs))


class ResolveBinaryTest(SimpleTestCase):
    """Tests for the resolution order of resolve_binary"""

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.bin_dir = self._temp_dir.name
        self.store = MemoryConfigStore()
        self.runner = FakeRunner()

    def tearDown(self):
        self._temp_dir.cleanup()

    def resolve(self, tool, signature=AMD64_GLIBC, **kwargs):
        return resolve_binary(
            tool,
            store=self.store,
            runner=self.runner,
            signature=signature,
            bin_dir=self.bin_dir,
            **kwargs,
        )

    def test_bundled_for_every_known_platform(self):
        """Test the bundled exiftool name is <tool>-<arch>-<libc> for each platform"""
        for arch in Architecture:
            for libc in LibcFamily:
                with self.subTest(arch=arch, libc=libc):
                    store = MemoryConfigStore()
                    name = f"exiftool-{arch.value}-{libc.value}"
                    expected = os.path.realpath(make_file(Path(self.bin_dir) / name))

                    result = resolve_binary(
                        TOOL_EXIFTOOL,
                        store=store,
                        runner=self.runner,
                        signature=PlatformSignature(arch, libc),
                        bin_dir=self.bin_dir,
                    )

                    self.assertEqual(result.source, SOURCE_BUNDLED)
                    self.assertEqual(result.path, expected)
                    self.assertEqual(os.path.basename(result.path), name)
                    self.assertTrue(is_executable(result.path))
                    self.assertEqual(store.get(KEY_EXIFTOOL_PATH), expected)

    def test_bundled_govod_has_no_libc_suffix(self):
        expected = os.path.realpath(make_file(Path(self.bin_dir) / 'go-vod-amd64'))

        result = self.resolve(TOOL_GOVOD)

        self.assertEqual(result.path, expected)
        self.assertEqual(self.store.get(KEY_VOD_PATH), expected)

    def test_unknown_platform_skips_bundled(self):
        """Test an unknown libc or architecture never selects a bundled binary"""
        make_file(Path(self.bin_dir) / 'exiftool-amd64-glibc')
        make_file(Path(self.bin_dir) / 'go-vod-amd64')

        for signature in (UNKNOWN_LIBC, UNKNOWN_ARCH, PlatformSignature()):
            with self.subTest(signature=str(signature)):
                self.store = MemoryConfigStore()
                self.assertIsNone(self.resolve(TOOL_GOVOD, signature=signature))
                self.assertIsNone(self.resolve(TOOL_EXIFTOOL, signature=signature))
                self.assertIsNone(self.store.get(KEY_EXIFTOOL_PATH))

    def test_unknown_platform_falls_back_to_path(self):
        self.runner.which_map = {'ffmpeg': '/usr/bin/ffmpeg\n'}

        result = self.resolve(TOOL_FFMPEG, signature=UNKNOWN_LIBC)

        self.assertEqual(result.source, SOURCE_PATH)
        self.assertEqual(result.path, '/usr/bin/ffmpeg')
        self.assertEqual(self.store.get(KEY_VOD_FFMPEG), '/usr/bin/ffmpeg')

    def test_exiftool_and_govod_never_use_path(self):
        self.runner.which_map = {'exiftool': '/usr/bin/exiftool', 'go-vod': '/usr/bin/go-vod'}

        self.assertIsNone(self.resolve(TOOL_EXIFTOOL, signature=PlatformSignature()))
        self.assertIsNone(self.resolve(TOOL_GOVOD, signature=PlatformSignature()))
        self.assertNotIn(('which', 'exiftool'), self.runner.events)

    def test_exiftool_not_found_records_no_local(self):
        """Test a failed exiftool detection switches to the bundled script"""
        self.assertIsNone(self.resolve(TOOL_EXIFTOOL))
        self.assertTrue(self.store.get(KEY_EXIFTOOL_NO_LOCAL))

        result = self.resolve(TOOL_EXIFTOOL)

        script = os.path.join(self.bin_dir, 'exiftool', 'exiftool')
        self.assertEqual(result.source, SOURCE_BUNDLED_SCRIPT)
        self.assertEqual(result.command, ['perl', script])

    def test_ffmpeg_not_found_records_nothing(self):
        self.assertIsNone(self.resolve(TOOL_FFMPEG))
        self.assertIsNone(self.store.get(KEY_VOD_FFMPEG))

    def test_configured_path_wins(self):
        configured = make_file(Path(self.bin_dir) / 'custom' / 'exiftool', mode=0o755)
        make_file(Path(self.bin_dir) / 'exiftool-amd64-glibc')
        self.store.set(KEY_EXIFTOOL_PATH, configured)

        result = self.resolve(TOOL_EXIFTOOL)

        self.assertEqual(result.source, SOURCE_CONFIGURED)
        self.assertEqual(result.path, configured)

    def test_configured_path_is_made_executable(self):
        configured = make_file(Path(self.bin_dir) / 'custom' / 'go-vod')
        self.store.set(KEY_VOD_PATH, configured)

        result = self.resolve(TOOL_GOVOD)

        self.assertEqual(result.path, configured)
        self.assertTrue(is_executable(configured))

    def test_configured_path_returned_when_chmod_fails(self):
        """Test the configured path is returned even if it stays non-executable"""
        configured = make_file(Path(self.bin_dir) / 'custom' / 'exiftool')
        self.store.set(KEY_EXIFTOOL_PATH, configured)

        with patch('sidecar.service.locator.os.chmod', side_effect=PermissionError('denied')):
            result = self.resolve(TOOL_EXIFTOOL)

        self.assertEqual(result.path, configured)
        self.assertFalse(is_executable(configured))

    def test_missing_configured_exiftool_is_kept(self):
        self.store.set(KEY_EXIFTOOL_PATH, '/opt/missing/exiftool')

        result = self.resolve(TOOL_EXIFTOOL)

        self.assertEqual(result.source, SOURCE_CONFIGURED)
        self.assertEqual(result.path, '/opt/missing/exiftool')

    def test_missing_configured_govod_is_redetected(self):
        expected = os.path.realpath(make_file(Path(self.bin_dir) / 'go-vod-amd64'))
        self.store.set(KEY_VOD_PATH, '/opt/missing/go-vod')

        self.assertEqual(detect_govod(
            store=self.store, runner=self.runner, signature=AMD64_GLIBC, bin_dir=self.bin_dir
        ), expected)
        self.assertEqual(self.store.get(KEY_VOD_PATH), expected)

    def test_no_local_flag_skips_bundled(self):
        make_file(Path(self.bin_dir) / 'exiftool-amd64-glibc')
        self.store.set(KEY_EXIFTOOL_NO_LOCAL, True)

        result = detect_exiftool(
            store=self.store, runner=self.runner, signature=AMD64_GLIBC, bin_dir=self.bin_dir
        )

        self.assertEqual(result.source, SOURCE_BUNDLED_SCRIPT)
        self.assertEqual(result.command[0], 'perl')

    def test_logger(self):
        logs = []
        self.resolve(TOOL_EXIFTOOL, logger=logs.append)
        self.assertTrue(any('bundled' in log for log in logs))


class GetExiftoolTest(SimpleTestCase):
    """Tests for the exiftool invocation form"""

    def test_configured(self):
        store = MemoryConfigStore({KEY_EXIFTOOL_PATH: '/opt/exiftool/exiftool'})
        self.assertEqual(get_exiftool(store=store), ['/opt/exiftool/exiftool'])

    def test_no_local(self):
        store = MemoryConfigStore({KEY_EXIFTOOL_NO_LOCAL: True})
        self.assertEqual(
            get_exiftool(store=store, bin_dir='/app/bin-ext'),
            ['perl', '/app/bin-ext/exiftool/exiftool'],
        )

    def test_nothing_found_uses_script(self):
        store = MemoryConfigStore()
        with tempfile.TemporaryDirectory() as temp_dir:
            command = get_exiftool(
                store=store, runner=FakeRunner(), signature=PlatformSignature(), bin_dir=temp_dir
            )

            self.assertEqual(command, ['perl', os.path.join(temp_dir, 'exiftool', 'exiftool')])
        self.assertTrue(store.get(KEY_EXIFTOOL_NO_LOCAL))


class DetectFfmpegTest(SimpleTestCase):
    """Tests for ffmpeg/ffprobe pair detection"""

    def test_both_found(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            ffmpeg = make_file(Path(temp_dir) / 'ffmpeg', mode=0o755)
            ffprobe = make_file(Path(temp_dir) / 'ffprobe', mode=0o755)
            store = MemoryConfigStore()
            runner = FakeRunner(which_map={'ffmpeg': ffmpeg, 'ffprobe': ffprobe})

            self.assertEqual(detect_ffmpeg(store=store, runner=runner), (ffmpeg, ffprobe))
            self.assertEqual(store.get(KEY_VOD_FFMPEG), ffmpeg)
            self.assertEqual(store.get(KEY_VOD_FFPROBE), ffprobe)

    def test_ffprobe_missing(self):
        runner = FakeRunner(which_map={'ffmpeg': '/usr/bin/ffmpeg'})
        self.assertIsNone(detect_ffmpeg(store=MemoryConfigStore(), runner=runner))

    def test_not_executable(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            ffmpeg = make_file(Path(temp_dir) / 'ffmpeg', mode=0o755)
            ffprobe = make_file(Path(temp_dir) / 'ffprobe', mode=0o644)
            runner = FakeRunner(which_map={'ffmpeg': ffmpeg, 'ffprobe': ffprobe})

            self.assertIsNone(detect_ffmpeg(store=MemoryConfigStore(), runner=runner))

    def test_configured_paths_used_before_path_lookup(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            ffmpeg = make_file(Path(temp_dir) / 'ffmpeg', mode=0o755)
            ffprobe = make_file(Path(temp_dir) / 'ffprobe', mode=0o755)
            store = MemoryConfigStore({KEY_VOD_FFMPEG: ffmpeg, KEY_VOD_FFPROBE: ffprobe})
            runner = FakeRunner()

            self.assertEqual(detect_ffmpeg(store=store, runner=runner), (ffmpeg, ffprobe))
            self.assertEqual(runner.events, [])
