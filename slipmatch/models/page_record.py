"""
Page Record Data Classes.

One ``PageRecord`` is produced per input page by the classifier and the
field extractor. Records are immutable: later stages only reference them.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PageKind(str, Enum):
    """The two page types found in a slip/label document."""
    PACKING_SLIP = "packing_slip"
    SHIPPING_LABEL = "shipping_label"


@dataclass(frozen=True)
class ExtractedFields:
    """
    Raw result of field extraction for one page.

    Every field is None when its heuristic found nothing.
    """
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    postcode: Optional[str] = None
    service: Optional[str] = None

    @property
    def missing_fields(self) -> list:
        return [k for k, v in self.to_dict().items() if v is None]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'postcode': self.postcode,
            'service': self.service,
        }


@dataclass(frozen=True)
class PageRecord:
    """
    Classified and extracted attributes of a single page.

    Attributes:
        page_number: 1-based position in the source document.
        kind: Packing slip or shipping label.
        order_number: Order token, packing slips only.
        customer_name: Normalized lowercase name, or None.
        postcode: Normalized postcode, or None.
        service: Canonical carrier service, shipping labels only.

    Example:
        >>> PageRecord(1, PageKind.PACKING_SLIP, order_number="#1001",
        ...            customer_name="alice smith")
    """
    page_number: int
    kind: PageKind
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    postcode: Optional[str] = None
    service: Optional[str] = None

    def __post_init__(self):
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {self.page_number}")
        if self.kind is PageKind.SHIPPING_LABEL and self.order_number is not None:
            raise ValueError("shipping labels do not carry an order number")
        if self.kind is PageKind.PACKING_SLIP and self.service is not None:
            raise ValueError("packing slips do not carry a shipping service")

    @property
    def is_packing_slip(self) -> bool:
        return self.kind is PageKind.PACKING_SLIP

    @property
    def is_shipping_label(self) -> bool:
        return self.kind is PageKind.SHIPPING_LABEL

    @classmethod
    def from_fields(cls, page_number: int, kind: PageKind, fields: ExtractedFields) -> 'PageRecord':
        """Build a record, dropping fields that do not apply to ``kind``."""
        if kind is PageKind.PACKING_SLIP:
            return cls(
                page_number=page_number,
                kind=kind,
                order_number=fields.order_number,
                customer_name=fields.customer_name,
                postcode=fields.postcode,
            )
        return cls(
            page_number=page_number,
            kind=kind,
            customer_name=fields.customer_name,
            postcode=fields.postcode,
            service=fields.service,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'page_number': self.page_number,
            'kind': self.kind.value,
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'postcode': self.postcode,
            'service': self.service,
        }
