"""
Packing Slip / Shipping Label Matcher.

Reconstructs which shipping label belongs to which order's packing slip
pages in a multi-page document, and surfaces orphaned slips, unusual
shipping services and uncertain matches for review.

Modules:
    - input_handler: page text sources (in-memory, PDF)
    - extraction: page classification and field extraction
    - matching: label scoring and matching strategies
    - grouping: order group construction
    - reporting: anomalies, summary and Excel export
    - resolution: manual review session
    - pipeline: end-to-end document analysis

Architecture:
    Text → Classify/Extract → Match → Group → Report
                                           ↓
                                    Manual Resolution
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'extraction',
    'matching',
    'grouping',
    'reporting',
    'resolution',
    'pipeline',
    'utils',
]
