from enum import Enum

from pyrsistent import PClass, field, pvector_field


class Kind(Enum):
    ALLOCATION = 'allocation'
    FREE = 'free'
    UNKNOWN = 'unknown'


ALLOCATION_METHODS = frozenset([
    'malloc', 'calloc', 'realloc-malloc', 'realloc-realloc', 'realloc-inplace',
    'memalign', 'posix_memalign', 'valloc', 'pvalloc', 'aligned_alloc', 'INIT',
])

FREE_METHODS = frozenset(['free', 'realloc-free'])


def kind_of(method):
    """
    Classify a logged function name. Names the logger is not known to emit map to ``Kind.UNKNOWN``.
    """
    if method in ALLOCATION_METHODS:
        return Kind.ALLOCATION

    if method in FREE_METHODS:
        return Kind.FREE

    return Kind.UNKNOWN


class Entry(PClass):
    """
    One entry of an allocation log: a header line and the backtrace frames that followed it.

    ``filled`` tells whether the header was structurally complete, ``kind`` whether the logged
    function was recognized. The two are independent: a complete header naming an unexpected
    function is filled but of kind ``Kind.UNKNOWN``.

    >>> e = Entry(address='0x10', kind=Kind.ALLOCATION, filled=True, size=16, method='malloc')
    >>> e.known
    True
    >>> print(e)
    + malloc 16 0x10 0 0
    """
    address = field(type=str, initial='')
    kind = field(type=Kind, initial=Kind.UNKNOWN)
    filled = field(type=bool, initial=False)
    size = field(type=int, initial=0, invariant=lambda size: (size >= 0, 'Negative size'))
    allocator_key = field(type=str, initial='')
    method = field(type=str, initial='')
    pid = field(type=int, initial=0)
    tid = field(type=int, initial=0)
    backtrace = pvector_field(str)
    line_number = field(type=int, initial=0)

    @property
    def known(self):
        return self.kind is not Kind.UNKNOWN

    @property
    def is_allocation(self):
        return self.kind is Kind.ALLOCATION

    @property
    def is_free(self):
        return self.kind is Kind.FREE

    def __str__(self):
        header = '+ {0} {1} {2} {3} {4}'.format(self.method, self.size, self.address, self.pid, self.tid)
        return '\n'.join([header] + ['\t' + frame for frame in self.backtrace])


def _entry(kind, method, address, size, allocator_key, kwargs):
    kwargs.setdefault('method', method)
    return Entry(address=address, kind=kind, filled=True, size=size,
                 allocator_key=allocator_key or kwargs['method'], **kwargs)


def allocation(address, size, allocator_key='', **kwargs):
    """
    Shorthand for a filled allocation entry. The allocator key defaults to the method name.

    >>> allocation('0x1', 100, 'siteA').is_allocation
    True
    """
    return _entry(Kind.ALLOCATION, 'malloc', address, size, allocator_key, kwargs)


def deallocation(address, size, allocator_key='', **kwargs):
    """
    Shorthand for a filled free entry. The allocator key defaults to the method name.
    """
    return _entry(Kind.FREE, 'free', address, size, allocator_key, kwargs)
