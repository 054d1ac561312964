# -*- coding: utf-8 -*-

from leaklog._entry import Entry, Kind, kind_of, allocation, deallocation, ALLOCATION_METHODS, FREE_METHODS

from leaklog._matcher import EntryMatcher, MatcherState

from leaklog._report import render, summarize, format_grouped, group_by_allocator, AllocatorGroup, LeakReport

from leaklog._parser import LogParser, parse_log

from leaklog._cli import main

from _leaklog_version import __version__
