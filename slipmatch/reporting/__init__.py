"""
Reporting Module for the Slip Matching System.

This module provides:
    - Orphaned slip and non-standard service detection
    - Processing summary with the confirmation gate
    - Excel report export
"""

from .anomalies import AnomalyReporter, NonStandardServiceLabel, ProcessingSummary
from .excel_exporter import ReportExporter

__all__ = [
    'AnomalyReporter',
    'NonStandardServiceLabel',
    'ProcessingSummary',
    'ReportExporter',
]
