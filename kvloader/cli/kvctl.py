#!/usr/bin/env python3
"""
kvctl - key-value source loader CLI

Commands:
    load            Load sources and print the resulting pairs
    check           Load sources and print only the keys

Usage:
    kvctl load --from-env-file app.env --from-literal LOG_LEVEL=debug
    kvctl load --from-file tls.crt=certs/server.crt --format json
    kvctl load --from-file secrets.yaml.age --age-identity ~/.config/age/keys.txt
    kvctl check --config sources.yaml

Environment:
    KVLOADER_AGE_IDENTITIES   Extra age identity files (os.pathsep separated)
    KVLOADER_SSH_DIR          Directory under $HOME probed for SSH keys
"""

import argparse
import json
import sys
from typing import List, Optional

from ..config import identity_sources_from_env, load_sources_file
from ..errors import KvLoaderError
from ..loader import KvLoader
from ..filesys import FileLoader
from ..logging_config import get_logger, is_verbose, setup_logging
from ..types import KvPairSources, Pair

logger = get_logger('kvloader.cli')


def build_sources(args) -> KvPairSources:
    """Combine the manifest (if any), command line flags and environment."""
    sources = KvPairSources()
    if args.config:
        sources = load_sources_file(args.config)

    flags = KvPairSources(
        env_sources=args.env_sources,
        literal_sources=args.literal_sources,
        file_sources=args.file_sources,
        age_identity_sources=tuple(args.age_identities) + identity_sources_from_env(),
    )
    return sources.merged(flags)


def load_pairs(args) -> List[Pair]:
    sources = build_sources(args)
    loader = KvLoader(ldr=FileLoader(args.root))
    return loader.load(sources)


def _printable(value: str) -> str:
    return value.encode('utf-8', 'surrogateescape').decode('utf-8', 'replace')


def cmd_load(args, out) -> int:
    """Print loaded pairs."""
    pairs = load_pairs(args)

    if args.format == 'json':
        out.write(json.dumps([{'key': p.key, 'value': p.value} for p in pairs], indent=2))
        out.write("\n")
    else:
        for pair in pairs:
            out.write(f"{pair.key}={_printable(pair.value)}\n")
    return 0


def cmd_check(args, out) -> int:
    """Print loaded keys and a count, never the values."""
    pairs = load_pairs(args)
    for pair in pairs:
        out.write(f"{pair.key}\n")
    out.write(f"OK: {len(pairs)} pairs\n")
    return 0


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--from-env-file', dest='env_sources', action='append', default=[],
                        metavar='PATH', help='Env-file to read (repeatable)')
    parser.add_argument('--from-literal', dest='literal_sources', action='append', default=[],
                        metavar='KEY=VALUE', help='Literal pair (repeatable)')
    parser.add_argument('--from-file', dest='file_sources', action='append', default=[],
                        metavar='[KEY=]PATH', help='File whose content becomes a value (repeatable)')
    parser.add_argument('--age-identity', dest='age_identities', action='append', default=[],
                        metavar='PATH', help='Age identity file (repeatable)')
    parser.add_argument('--config', '-c', metavar='FILE',
                        help='YAML or JSON source manifest')
    parser.add_argument('--root', default='.', metavar='DIR',
                        help='Directory that sources are read from (default: .)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--log-file', metavar='FILE', help='Also write logs to FILE')
    parser.add_argument('--json-logs', action='store_true', help='Log in JSON format')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='kvctl',
        description='Load key-value pairs from literals, files and env-files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # load
    load_parser = subparsers.add_parser('load', help='Print loaded pairs')
    _add_source_arguments(load_parser)
    load_parser.add_argument('--format', choices=['env', 'json'], default='env',
                             help='Output format (default: env)')

    # check
    check_parser = subparsers.add_parser('check', help='Print loaded keys only')
    _add_source_arguments(check_parser)

    return parser


def main(argv: Optional[List[str]] = None, out=None) -> int:
    out = out if out is not None else sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(verbose=args.verbose, log_file=args.log_file, json_format=args.json_logs)

    commands = {
        'load': cmd_load,
        'check': cmd_check,
    }

    try:
        return commands[args.command](args, out)
    except KvLoaderError as e:
        logger.debug("Load failed", exc_info=is_verbose())
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
