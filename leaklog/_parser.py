"""
Reading of the text log written by the malloc logging library.

Each call of an allocation function produces a header line::

    + malloc 24 0x55d0c3b2a2a0 4242 4242

optionally followed by backtrace frames, one per line, and a ``-`` line closing the entry.
Lines starting with ``#`` carry information about the logged process. Any other line starting
with ``+`` (the statistics box printed at exit) closes the open entry. Everything else found
outside an entry is noise and is skipped.
"""
import logging

from pyrsistent import pvector

from leaklog._entry import Entry, Kind, kind_of

logger = logging.getLogger(__name__)

NULL_ADDRESSES = frozenset(['(nil)', '0', '0x0', 'NULL'])
NULL_FREE_METHOD = 'free(NULL)'


def _header_entry(line, line_number, backtrace):
    fields = line[1:].split()
    if len(fields) != 5:
        return Entry(method=fields[0] if fields else '', line_number=line_number, backtrace=backtrace)

    method, size, address, pid, tid = fields
    try:
        size, pid, tid = int(size), int(pid), int(tid)
    except ValueError:
        return Entry(method=method, address=address, line_number=line_number, backtrace=backtrace)

    if size < 0:
        return Entry(method=method, address=address, line_number=line_number, backtrace=backtrace)

    return Entry(address=address, kind=kind_of(method), filled=True, size=size,
                 allocator_key=backtrace[0] if backtrace else method,
                 method=method, pid=pid, tid=tid, backtrace=backtrace, line_number=line_number)


class LogParser(object):
    """
    Turns log lines into :py:class:`leaklog.Entry` values.

    A parser accumulates, across calls to :py:meth:`parse`, the process metadata found in ``#``
    lines, the number of lines read and the number of null pointer frees dropped.
    Malformed headers become entries with ``filled`` set to False, the parser itself never
    raises on bad input.
    """
    def __init__(self):
        self.metadata = {}
        self.null_frees = 0
        self.line_count = 0

    def parse(self, lines):
        header = None
        header_line = 0
        frames = []
        for line in lines:
            self.line_count += 1
            line = line.rstrip('\r\n')
            if line.startswith('+ '):
                if header is not None:
                    yield from self._close(header, header_line, frames)

                header, header_line, frames = line, self.line_count, []
            elif line.startswith(('#', '+')) or line.strip() == '-':
                if header is not None:
                    yield from self._close(header, header_line, frames)
                    header = None

                if line.startswith('#'):
                    self._record_metadata(line)
            elif header is not None:
                if line.strip():
                    frames.append(line.strip())

        if header is not None:
            yield from self._close(header, header_line, frames)

    def _close(self, header, header_line, frames):
        entry = _header_entry(header, header_line, pvector(frames))
        if entry.method == NULL_FREE_METHOD or (entry.kind is Kind.FREE and entry.address in NULL_ADDRESSES):
            self.null_frees += 1
            return

        if not entry.filled:
            logger.debug('Malformed entry header at line %d: %r', header_line, header)

        yield entry

    def _record_metadata(self, line):
        parts = line[1:].strip().split(None, 1)
        if parts:
            self.metadata[parts[0]] = parts[1] if len(parts) > 1 else ''


def parse_log(lines):
    """
    Parse an iterable of log lines, for instance an open file, into entries.

    >>> [str(e) for e in parse_log(['+ malloc 16 0x10 1 1', '-', '+ free 16 0x10 1 1'])]
    ['+ malloc 16 0x10 1 1', '+ free 16 0x10 1 1']
    """
    return LogParser().parse(lines)
