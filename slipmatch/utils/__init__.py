"""
Utility Module for the Slip Matching System.

Provides common utilities used across all other modules:
    - Logging configuration
    - Diagnostic sinks for matching decisions
    - File helpers
"""

from .logger import setup_logger, get_logger
from .diagnostics import DiagnosticSink, LoggingSink, RecordingSink, DiagnosticEvent
from .helpers import ensure_directory, generate_timestamp

__all__ = [
    'setup_logger',
    'get_logger',
    'DiagnosticSink',
    'LoggingSink',
    'RecordingSink',
    'DiagnosticEvent',
    'ensure_directory',
    'generate_timestamp',
]
