"""
Document Analysis Pipeline.

Runs the full flow for one document:

    page text source -> classify + extract -> PageRecords
                     -> grouping engine -> anomalies / review list

Pages are read strictly in ascending page order. A source that cannot be
read aborts the run with SourceReadError and produces no partial result.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from slipmatch.utils.diagnostics import DiagnosticSink
from slipmatch.utils.exceptions import SourceReadError
from slipmatch.utils.logger import get_logger
from slipmatch.models.page_record import PageRecord
from slipmatch.models.order_group import OrderGroup, ProcessedOrder, convert_groups_to_orders
from slipmatch.extraction import FieldExtractor, PageClassifier
from slipmatch.matching import MatchStrategy
from slipmatch.grouping import GroupingEngine, GroupingResult
from slipmatch.reporting import AnomalyReporter, NonStandardServiceLabel, ProcessingSummary
from slipmatch.input_handler import InMemoryTextSource, PageTextSource

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """
    Everything the review and document generation steps need.

    Anomaly properties are recomputed from the current groups on every
    access, so they stay correct after manual resolution.
    """
    pages: List[PageRecord]
    grouping: GroupingResult
    reporter: AnomalyReporter = field(default_factory=AnomalyReporter, repr=False)

    @property
    def groups(self) -> List[OrderGroup]:
        return self.grouping.groups

    @property
    def unmatched_labels(self) -> List[PageRecord]:
        """Shipping labels no current group references, in page order."""
        assigned = {
            g.shipping_label.page_number for g in self.groups if g.shipping_label is not None
        }
        return [
            p for p in self.pages
            if p.is_shipping_label and p.page_number not in assigned
        ]

    @property
    def total_packing_slips_detected(self) -> int:
        return sum(1 for p in self.pages if p.is_packing_slip)

    @property
    def total_shipping_labels_detected(self) -> int:
        return sum(1 for p in self.pages if p.is_shipping_label)

    @property
    def orphaned_slips(self) -> List[PageRecord]:
        return self.reporter.orphaned_slips(self.groups)

    @property
    def non_standard_service_labels(self) -> List[NonStandardServiceLabel]:
        return self.reporter.non_standard_service_labels(self.groups)

    @property
    def uncertain_matches(self) -> List[OrderGroup]:
        return [g for g in self.groups if g.match_confidence.needs_review]

    @property
    def summary(self) -> ProcessingSummary:
        return self.reporter.summarize(
            self.groups,
            self.total_packing_slips_detected,
            self.total_shipping_labels_detected,
            self.unmatched_labels,
        )

    def confirmed_orders(self) -> List[ProcessedOrder]:
        return convert_groups_to_orders(self.groups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'grouping': self.grouping.to_dict(),
            'orphaned_slip_pages': [s.page_number for s in self.orphaned_slips],
            'unmatched_label_pages': [l.page_number for l in self.unmatched_labels],
            'non_standard_service_labels': [a.to_dict() for a in self.non_standard_service_labels],
        }


class DocumentAnalyzer:
    """
    Classifies, extracts and groups the pages of one document.

    Example:
        >>> analyzer = DocumentAnalyzer()
        >>> with PDFTextSource("orders.pdf") as source:
        ...     analysis = analyzer.analyze(source)
        >>> len(analysis.confirmed_orders())
        12
    """

    def __init__(
        self,
        classifier: Optional[PageClassifier] = None,
        extractor: Optional[FieldExtractor] = None,
        engine: Optional[GroupingEngine] = None,
        reporter: Optional[AnomalyReporter] = None,
        strategy: Optional[MatchStrategy] = None,
        sink: Optional[DiagnosticSink] = None
    ) -> None:
        self.classifier = classifier or PageClassifier()
        self.extractor = extractor or FieldExtractor()
        self.engine = engine or GroupingEngine(strategy=strategy, sink=sink)
        self.reporter = reporter or AnomalyReporter()

    def read_pages(self, source: PageTextSource) -> List[PageRecord]:
        """
        Read, classify and extract every page of ``source``.

        Raises:
            SourceReadError: If the source cannot provide page text.
        """
        try:
            page_count = source.get_page_count()
        except SourceReadError:
            raise
        except Exception as e:
            raise SourceReadError(source.name, str(e)) from e

        logger.info(f"Analyzing {page_count} pages from {source.name}")

        records = []
        for page_number in range(1, page_count + 1):
            try:
                text = source.get_page_text(page_number)
            except SourceReadError:
                raise
            except Exception as e:
                raise SourceReadError(source.name, str(e), page_number) from e

            records.append(self.build_record(page_number, text))

        return records

    def build_record(self, page_number: int, text: str) -> PageRecord:
        """Classify and extract a single page."""
        kind = self.classifier.classify(text)
        fields = self.extractor.extract(text, kind)
        record = PageRecord.from_fields(page_number, kind, fields)

        if record.is_shipping_label and not self.classifier.label_indicators(text).is_royal_mail_label:
            logger.debug(f"Page {page_number}: no Royal Mail markings; label name rules may not apply")

        logger.debug(
            f"Page {page_number}: {kind.value}, order: {record.order_number}, "
            f"customer: {record.customer_name}, postcode: {record.postcode}, "
            f"service: {record.service}"
        )
        return record

    def analyze(self, source: PageTextSource) -> AnalysisResult:
        """
        Run the full analysis for one document.

        Args:
            source: Page text source.

        Returns:
            AnalysisResult.

        Raises:
            SourceReadError: If the document cannot be read.
        """
        pages = self.read_pages(source)
        grouping = self.engine.group(pages)
        result = AnalysisResult(pages=pages, grouping=grouping, reporter=self.reporter)

        logger.info(
            f"Detected {result.total_packing_slips_detected} packing slips and "
            f"{result.total_shipping_labels_detected} shipping labels"
        )
        return result

    def analyze_texts(self, texts: Sequence[str]) -> AnalysisResult:
        """Analyze pre-extracted page texts (page 1 first)."""
        return self.analyze(InMemoryTextSource(texts))
