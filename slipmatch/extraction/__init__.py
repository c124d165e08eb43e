"""
Extraction Module for the Slip Matching System.

This module provides:
    - Page classification (packing slip vs shipping label)
    - Field extraction (order number, customer name, postcode, service)
    - Name and postcode normalization
"""

from .classifier import PageClassifier, LabelIndicators
from .field_extractor import FieldExtractor
from .normalizers import normalize_customer_name, normalize_postcode

__all__ = [
    'PageClassifier',
    'LabelIndicators',
    'FieldExtractor',
    'normalize_customer_name',
    'normalize_postcode',
]
