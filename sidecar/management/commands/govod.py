"""
Django management command to check, configure and (re)start go-vod.

Usage:
    ./manage.py govod               # probe, restart once if needed, probe again
    ./manage.py govod --test        # probe only
    ./manage.py govod --restart     # restart (or reconfigure, if external) without probing first
    ./manage.py govod --configure   # push config to an external go-vod
"""

import json
import sys

from django.core.management.base import BaseCommand, CommandError

from sidecar.service.config import get_config_store, get_govod_version
from sidecar.service.errors import SidecarError
from sidecar.service.health import check_govod, configure_govod
from sidecar.service.orchestrator import ensure_govod, is_external, start_govod
from sidecar.service.vod_config import get_govod_tempdir


class Command(BaseCommand):
    help = 'Check, configure and (re)start the go-vod transcoder'

    def add_arguments(self, parser):
        action = parser.add_mutually_exclusive_group()
        action.add_argument(
            '--test',
            action='store_true',
            help='Only probe go-vod; do not restart it'
        )
        action.add_argument(
            '--restart',
            action='store_true',
            help='Restart go-vod (or push config if external) without probing first'
        )
        action.add_argument(
            '--configure',
            action='store_true',
            help='Push the configuration to an external go-vod'
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Enable verbose output'
        )
        parser.add_argument(
            '--json',
            action='store_true',
            help='Output result as JSON'
        )

    def handle(self, *args, **options):
        verbose = options['verbose']
        output_json = options['json']

        store = get_config_store()
        external = is_external(store)
        logger = self.stdout.write if verbose and not output_json else None

        if options['test']:
            action = 'test'
        elif options['restart']:
            action = 'restart'
        elif options['configure']:
            action = 'configure'
        else:
            action = 'ensure'

        if not output_json:
            self.stdout.write('\n=== go-vod ===\n')
            self.stdout.write(f"Mode: {'external' if external else 'local'}")
            self.stdout.write(f"Required version: {get_govod_version()}")
            if not external:
                self.stdout.write(f"Temp directory: {get_govod_tempdir(store)}")

        result = {'action': action, 'external': external}

        try:
            if action == 'test':
                result['version'] = check_govod(store=store, logger=logger)
            elif action == 'restart':
                result['log_file'] = start_govod(store=store, logger=logger)
            elif action == 'configure':
                if not external:
                    raise CommandError('go-vod is not externally managed; use --restart instead')
                configure_govod(store=store, logger=logger)
            else:
                result['version'] = ensure_govod(store=store, logger=logger)

        except SidecarError as e:
            if output_json:
                result.update({'success': False, 'error': str(e)})
                self.stdout.write(json.dumps(result, indent=2))
                sys.exit(1)
            raise CommandError(f"go-vod {action} failed: {e}")

        if output_json:
            result['success'] = True
            self.stdout.write(json.dumps(result, indent=2))
            return

        if result.get('version'):
            self.stdout.write(self.style.SUCCESS(f"go-vod is running (version {result['version']})"))
        elif action == 'restart' and result.get('log_file'):
            self.stdout.write(self.style.SUCCESS('go-vod restarted'))
            self.stdout.write(f"  Log: {result['log_file']}")
        else:
            self.stdout.write(self.style.SUCCESS('go-vod configured'))

        self.stdout.write('')
