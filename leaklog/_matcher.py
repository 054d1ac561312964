import logging
import time

logger = logging.getLogger(__name__)


class MatcherState(object):
    """
    Everything accumulated over one analysis session.

    ``outstanding`` holds allocations that have not been freed yet, keyed by address.
    ``prior_frees`` holds frees that had no allocation in the session, only the latest one
    per address. ``prior_freed_count`` and ``prior_freed_bytes`` count every such free,
    including the ones later overwritten in ``prior_frees``.
    """
    def __init__(self):
        self.outstanding = {}
        self.prior_frees = {}
        self.balance = 0
        self.prior_freed_bytes = 0
        self.prior_freed_count = 0
        self.matched_pair_count = 0
        self.matched_pair_bytes = 0
        self.session_start = None

    def __repr__(self):
        return ('MatcherState(outstanding={0}, prior_frees={1}, balance={2}, prior_freed_bytes={3}, '
                'prior_freed_count={4}, matched_pair_count={5}, matched_pair_bytes={6})').format(
            len(self.outstanding), len(self.prior_frees), self.balance, self.prior_freed_bytes,
            self.prior_freed_count, self.matched_pair_count, self.matched_pair_bytes)


class EntryMatcher(object):
    """
    Pairs allocation and free entries by address and keeps the running balance.

    Not thread safe. Anomalies in the log (unrecognized entries, repeated frees of an
    address that was never allocated in the session) are reported as warnings through the
    ``leaklog`` loggers and never interrupt processing.

    >>> from leaklog import allocation, deallocation
    >>> matcher = EntryMatcher()
    >>> matcher.process_entry(allocation('0x1', 100, 'siteA'))
    >>> matcher.process_entry(deallocation('0x1', 100))
    >>> matcher.state.balance, matcher.state.matched_pair_count
    (0, 1)
    """
    def __init__(self, clock=time.time):
        self.state = MatcherState()
        self._clock = clock

    def process_entry(self, entry):
        state = self.state
        if state.session_start is None:
            state.session_start = self._clock()

        if entry.filled and not entry.known:
            logger.warning('unknown entry: %s', entry)

        if not entry.known:
            return

        if entry.is_allocation:
            # A live address is replaced without complaint, unlike frees below
            state.outstanding[entry.address] = entry
            state.balance -= entry.size
        elif entry.is_free:
            if state.outstanding.pop(entry.address, None) is not None:
                state.balance += entry.size
                state.matched_pair_count += 1
                state.matched_pair_bytes += entry.size
            else:
                previous = state.prior_frees.get(entry.address)
                state.prior_frees[entry.address] = entry
                if previous is not None:
                    logger.warning('Memory freed twice: %s %s', entry, previous)

                state.prior_freed_bytes += entry.size
                state.prior_freed_count += 1

    def process_entries(self, entries):
        """
        Feed every entry of an iterable to :py:meth:`process_entry`. Returns the number of entries fed.
        """
        count = 0
        for entry in entries:
            self.process_entry(entry)
            count += 1

        logger.debug('Processed %d entries, %d outstanding', count, len(self.state.outstanding))
        return count
