"""
Rendering of the accumulated matcher state as a human readable leak report.

The report is first summarized into an immutable :py:class:`LeakReport`, which is then written
line by line to any object with a ``write`` method. Numbers are grouped with commas no matter
which locale the process runs in, so reports from different machines can be compared as text.
"""
import time

from pyrsistent import PClass, field, pvector_field

from leaklog._entry import Entry


def format_grouped(n):
    """
    Format an integer with comma thousands separators.

    >>> format_grouped(-1234567)
    '-1,234,567'
    """
    return '{0:,d}'.format(n)


class AllocatorGroup(PClass):
    """
    The outstanding allocations sharing one allocator key.
    """
    key = field(type=str, mandatory=True)
    entries = pvector_field(Entry)
    total_size = field(type=int, initial=0)

    @property
    def count(self):
        return len(self.entries)

    @property
    def representative(self):
        return self.entries[0]


def group_by_allocator(outstanding):
    """
    Group the values of an address to entry mapping by allocator key. Groups are returned sorted
    by key in descending order, entries within a group keep the iteration order of ``outstanding``.
    """
    by_key = {}
    for entry in outstanding.values():
        by_key.setdefault(entry.allocator_key, []).append(entry)

    groups = [AllocatorGroup(key=key, entries=entries, total_size=sum(e.size for e in entries))
              for key, entries in by_key.items()]

    return sorted(groups, key=lambda group: group.key, reverse=True)


class LeakReport(PClass):
    """
    Snapshot of a :py:class:`leaklog.MatcherState` holding exactly what :py:func:`render` prints.
    ``serialize()`` gives the same content as plain data.
    """
    elapsed_millis = field(type=int, initial=0)
    balance = field(type=int, initial=0)
    outstanding_count = field(type=int, initial=0)
    prior_freed_bytes = field(type=int, initial=0)
    prior_freed_count = field(type=int, initial=0)
    prior_free_addresses = field(type=int, initial=0)
    matched_pair_count = field(type=int, initial=0)
    matched_pair_bytes = field(type=int, initial=0)
    groups = pvector_field(AllocatorGroup)


def summarize(state, clock=time.time):
    """
    Build a :py:class:`LeakReport` from the state. The state is only read.
    """
    elapsed = 0
    if state.session_start is not None:
        elapsed = int((clock() - state.session_start) * 1000)

    return LeakReport(elapsed_millis=elapsed,
                      balance=state.balance,
                      outstanding_count=len(state.outstanding),
                      prior_freed_bytes=state.prior_freed_bytes,
                      prior_freed_count=state.prior_freed_count,
                      prior_free_addresses=len(state.prior_frees),
                      matched_pair_count=state.matched_pair_count,
                      matched_pair_bytes=state.matched_pair_bytes,
                      groups=group_by_allocator(state.outstanding))


def render(state, sink, clock=time.time):
    """
    Write the leak report for ``state`` to ``sink``.

    The summary counters come first, followed by one block per allocator key showing the number
    of outstanding entries, their total size and the first of them in full.
    """
    report = summarize(state, clock)
    sink.write('Processing timespan in millis (since first entry processed): {0}\n'.format(
        format_grouped(report.elapsed_millis)))
    sink.write('Allocation balance (bytes, negative means leak): {0}\n'.format(
        format_grouped(report.balance)))
    sink.write('Number of objects allocated in log session but not freed yet: {0}\n'.format(
        report.outstanding_count))
    sink.write('Size of objects freed in log session but not allocated in log session (bytes): {0}\n'.format(
        format_grouped(report.prior_freed_bytes)))
    sink.write('Number of objects freed in session but not allocated in session: {0} without multiple frees: {1}\n'.format(
        report.prior_freed_count, report.prior_free_addresses))
    sink.write('Matching alloc/free pairs through the logging session (n, bytes): {0} {1}\n'.format(
        report.matched_pair_count, format_grouped(report.matched_pair_bytes)))

    for group in report.groups:
        sink.write('\nallocator: {0}\n\tN:{1} BYTES: {2}\n{3}\n'.format(
            group.key, group.count, format_grouped(group.total_size), group.representative))
