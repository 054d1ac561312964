import argparse
import io
import logging
import sys

from _leaklog_version import __version__
from leaklog._matcher import EntryMatcher
from leaklog._parser import LogParser
from leaklog._report import render

logger = logging.getLogger(__name__)


def _build_parser():
    parser = argparse.ArgumentParser(
        prog='leaklog',
        description="""Reads an allocation log and reports memory that was allocated but not freed.""",
    )
    parser.add_argument("-l", "--log_level", type=int, dest="log_level", default=20,
                        help="Log Level (debug=10, info=20, warning=30, error=40, critical=50)"
                             " [default: %(default)s]"
                        )
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    parser.add_argument('path_in', type=str, nargs='?', default='-',
                        help='Path to the allocation log, stdin if omitted or "-".')
    return parser


def analyse(log_file, out=None):
    """
    Match every entry of ``log_file`` and write the report to ``out``. Returns the matcher.
    """
    log_parser = LogParser()
    matcher = EntryMatcher()
    count = matcher.process_entries(log_parser.parse(log_file))
    for key, value in log_parser.metadata.items():
        logger.info('%s %s', key, value)

    logger.info('Read %d lines, %d entries, skipped %d null frees',
                log_parser.line_count, count, log_parser.null_frees)
    render(matcher.state, out if out is not None else sys.stdout)
    return matcher


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format='%(asctime)s - %(filename)s#%(lineno)d - %(levelname)-8s - %(message)s',
        stream=sys.stderr,
    )
    if args.path_in == '-':
        buffer = getattr(sys.stdin, 'buffer', None)
        if buffer is None:
            analyse(sys.stdin)
            return 0

        # Same decoding as for files; detach so that sys.stdin stays open
        log_file = io.TextIOWrapper(buffer, encoding='latin-1')
        try:
            analyse(log_file)
        finally:
            log_file.detach()

        return 0

    try:
        log_file = open(args.path_in, encoding='latin-1')
    except OSError as e:
        parser.error("can't open '{0}': {1}".format(args.path_in, e.strerror))

    with log_file:
        analyse(log_file)

    return 0
