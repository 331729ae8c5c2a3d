"""
Command line entry point: classify a directory and print the result
"""
import argparse
import json
import sys
from typing import List, Optional

from . import __version__
from .config import MatchesOptions
from .errors import XIgnoreError
from .matcher import MatchesResult, dir_matches
from .utils import configure_logging, get_logger

logger = get_logger("xignore-cli")

SECTIONS = {
    'matched': ('matched_files', 'matched_dirs'),
    'unmatched': ('unmatched_files', 'unmatched_dirs'),
    'errors': ('error_files', 'error_dirs'),
}


def format_text(result: MatchesResult, show: str) -> str:
    """Render the selected result lists as '# heading' blocks of paths"""
    names = SECTIONS[show] if show != 'all' else sum(SECTIONS.values(), ())
    blocks = []
    for name in names:
        paths = getattr(result, name)
        if not paths and show == 'all':
            continue
        lines = [f"# {name.replace('_', ' ')} ({len(paths)})"]
        lines.extend(paths)
        blocks.append('\n'.join(lines))
    return '\n\n'.join(blocks)


def parse_args(args: List[str]) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='xignore',
        description='Classify files under a directory against ignore-list rules'
    )
    parser.add_argument('directory', help='Directory to classify')
    parser.add_argument('--ignorefile', default='', help='Ignore-list file name (default: .xignore)')
    parser.add_argument('--nested', action='store_true', default=None,
                        help='Also apply ignore files found in subdirectories')
    parser.add_argument('--before', action='append', default=[], metavar='RULE',
                        help='Rule evaluated before the ignore file (repeatable)')
    parser.add_argument('--after', action='append', default=[], metavar='RULE',
                        help='Rule evaluated after the ignore file (repeatable)')
    parser.add_argument('--show', choices=['matched', 'unmatched', 'errors', 'all'],
                        default='matched', help='Which lists to print (default: matched)')
    parser.add_argument('--json', action='store_true', help='Print the full result as JSON')
    parser.add_argument('--log-level', help='Log level (TRACE, DEBUG, INFO, WARNING, ERROR)')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(args)


def main(args: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code"""
    parsed = parse_args(sys.argv[1:] if args is None else args)
    configure_logging(log_level=parsed.log_level, log_file=parsed.log_file)

    try:
        options = MatchesOptions.from_env(
            ignorefile=parsed.ignorefile,
            nested=parsed.nested,
            before_patterns=parsed.before,
            after_patterns=parsed.after,
        )
        result = dir_matches(parsed.directory, options)
    except (XIgnoreError, ValueError) as e:
        logger.debug("Matching failed", exc_info=True)
        print(f"xignore: error: {e}", file=sys.stderr)
        return 1

    if parsed.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        output = format_text(result, parsed.show)
        if output:
            print(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
