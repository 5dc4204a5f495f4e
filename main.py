#!/usr/bin/env python3
"""
Node dependency cache - Main entry point

Usage:
    node_cache restore --package-manager=<npm|pnpm|yarn> \
        (--cache-url=<URL> | --cache-dir=<DIR>) \
        [--cache-dependency-path=<PATTERNS>] \
        [--workspace=<DIR>] [--output-file=<FILE>] [--state-file=<FILE>]

    node_cache save --package-manager=<npm|pnpm|yarn> \
        (--cache-url=<URL> | --cache-dir=<DIR>) --state-file=<FILE>

    node_cache serve <port> --cache_dir=<CACHE_DIR> [--host=<HOST>]
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from application.dtos import RestoreSettings
from application.restore_cache import RestoreCache
from application.save_cache import SaveCache
from domain.cache_path_resolver import CachePathResolver
from domain.cache_store import CacheStore
from domain.errors import CacheRestoreError
from domain.package_manager import supported_package_managers
from infrastructure.file_output_sink import FileOutputSink
from infrastructure.file_system_cache_store import FileSystemCacheStore
from infrastructure.http_cache_store import HttpCacheStore
from infrastructure.subprocess_command_runner import SubprocessCommandRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Restore and save package manager caches for Node.js builds',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--log-level', default='INFO',
                       help='Logging level (default: INFO)')
    subparsers = parser.add_subparsers(dest='command', required=True)
    
    for name, help_text in (('restore', 'Restore the dependency cache'),
                            ('save', 'Save the dependency cache after the build')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--package-manager', required=True,
                         help=f"Package manager ({', '.join(supported_package_managers())})")
        sub.add_argument('--cache-url', default=os.environ.get('NODE_CACHE_URL'),
                         help='Base URL of the cache server (env: NODE_CACHE_URL)')
        sub.add_argument('--cache-dir', default=os.environ.get('NODE_CACHE_DIR'),
                         help='Local directory used as cache store (env: NODE_CACHE_DIR)')
        sub.add_argument('--workspace',
                         help='Project root (default: GITHUB_WORKSPACE or current directory)')
        sub.add_argument('--output-file', type=Path,
                         help='File receiving name=value outputs')
        sub.add_argument('--state-file', type=Path,
                         help='JSON file shared between the restore and save steps')
        sub.add_argument('--command-timeout', type=float,
                         help='Timeout in seconds for package manager commands')
        if name == 'restore':
            sub.add_argument('--cache-dependency-path', default='',
                             help='Newline separated lock file paths or patterns')
    
    serve = subparsers.add_parser('serve', help='Run the cache server')
    serve.add_argument('port', type=int, help='Port to listen on')
    serve.add_argument('--cache_dir', required=True, help='Directory to store cache archives')
    serve.add_argument('--host', default='0.0.0.0',
                       help='Host to bind to (default: 0.0.0.0)')
    serve.add_argument('--max-archive-age', type=int,
                       help='Remove archives older than this many seconds at startup')
    
    return parser


def build_cache_store(args: argparse.Namespace) -> CacheStore:
    if args.cache_url:
        return HttpCacheStore(args.cache_url)
    if args.cache_dir:
        return FileSystemCacheStore(Path(args.cache_dir))
    raise CacheRestoreError("Either --cache-url or --cache-dir must be provided")


def run_restore(args: argparse.Namespace) -> int:
    settings = RestoreSettings.from_environment(workspace=args.workspace)
    output_sink = FileOutputSink(args.output_file, args.state_file)
    cache_store = build_cache_store(args)
    handler = RestoreCache(
        settings=settings,
        path_resolver=CachePathResolver(SubprocessCommandRunner(args.command_timeout)),
        cache_store=cache_store,
        output_sink=output_sink
    )
    try:
        handler.restore(args.package_manager, args.cache_dependency_path)
    finally:
        cache_store.close()
    return 0


def run_save(args: argparse.Namespace) -> int:
    settings = RestoreSettings.from_environment(workspace=args.workspace)
    output_sink = FileOutputSink(args.output_file, args.state_file)
    cache_store = build_cache_store(args)
    handler = SaveCache(
        settings=settings,
        path_resolver=CachePathResolver(SubprocessCommandRunner(args.command_timeout)),
        cache_store=cache_store,
        output_sink=output_sink
    )
    try:
        handler.save(args.package_manager)
    finally:
        cache_store.close()
    return 0


def run_server(args: argparse.Namespace) -> int:
    import uvicorn
    from interfaces.api import initialize_app
    
    app = initialize_app(cache_dir=args.cache_dir, max_archive_age=args.max_archive_age)
    
    print(f"Starting cache server on {args.host}:{args.port}")
    print(f"Cache directory: {args.cache_dir}")
    
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(levelname)s %(name)s: %(message)s'
    )
    
    commands = {'restore': run_restore, 'save': run_save, 'serve': run_server}
    try:
        return commands[args.command](args)
    except CacheRestoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
