"""
Manual Resolution Module for the Slip Matching System.
"""

from .coordinator import ManualResolutionCoordinator

__all__ = ['ManualResolutionCoordinator']
