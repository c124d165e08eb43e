"""
Data model for the slip matching system.

Page records, label candidates and order groups shared by every stage.
"""

from .page_record import PageKind, PageRecord, ExtractedFields
from .order_group import (
    MatchConfidence,
    LabelCandidate,
    OrderGroup,
    ProcessedOrder,
    convert_groups_to_orders,
)

__all__ = [
    'PageKind',
    'PageRecord',
    'ExtractedFields',
    'MatchConfidence',
    'LabelCandidate',
    'OrderGroup',
    'ProcessedOrder',
    'convert_groups_to_orders',
]
