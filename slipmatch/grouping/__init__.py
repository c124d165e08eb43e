"""
Grouping Module for the Slip Matching System.

Builds order groups from matcher proposals and partitions them by
match confidence.
"""

from .engine import GroupingEngine, GroupingResult

__all__ = ['GroupingEngine', 'GroupingResult']
