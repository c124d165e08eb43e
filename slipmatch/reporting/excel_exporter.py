"""
Excel Report Exporter Module.

Writes the outcome of a document analysis to an Excel workbook for
review. Uses openpyxl.

Sheets:
    - Orders: every order group with its label and confidence
    - Orphaned Slips: packing slips without a label
    - Non-standard Services: labels not using the standard service
    - Unmatched Labels: labels assigned to no order
    - Summary: totals and the confirmation flag

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from slipmatch.utils.exceptions import ReportExportError
from slipmatch.utils.helpers import ensure_directory, generate_timestamp
from slipmatch.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


class ReportExporter:
    """
    Exports an AnalysisResult to an Excel workbook.

    Attributes:
        output_dir: Directory for report files.

    Example:
        >>> exporter = ReportExporter()
        >>> path = exporter.export(analysis, "matches.xlsx")
    """

    ORDER_HEADERS = (
        'Order Number',
        'Packing Slip Pages',
        'Label Page',
        'Customer Name',
        'Postcode',
        'Service',
        'Confidence',
        'Score',
        'Match Reasons',
    )

    def __init__(self, output_dir: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir or get_config("output.excel.output_dir", "outputs"))
        self.filename_pattern = get_config(
            "output.excel.filename_pattern", "slip_matches_{timestamp}.xlsx"
        )
        logger.debug(f"ReportExporter initialized (output_dir: {self.output_dir})")

    def export(self, analysis, filename: Optional[str] = None) -> str:
        """
        Write the report workbook.

        Args:
            analysis: AnalysisResult from ``DocumentAnalyzer.analyze``.
            filename: Output filename, or a path. Auto-generated when None.

        Returns:
            Path of the written file.

        Raises:
            ReportExportError: If the workbook cannot be written.
        """
        if filename is None:
            filename = self.filename_pattern.format(timestamp=generate_timestamp())

        filepath = Path(filename)
        if not filepath.is_absolute() and filepath.parent == Path('.'):
            filepath = self.output_dir / filepath

        try:
            ensure_directory(filepath.parent)
            workbook = Workbook()

            self._write_sheet(
                workbook.active, "Orders", self.ORDER_HEADERS,
                [self._order_row(g) for g in analysis.groups], "4472C4"
            )
            self._write_sheet(
                workbook.create_sheet(), "Orphaned Slips",
                ('Order Number', 'Page', 'Customer Name', 'Postcode'),
                [
                    (s.order_number, s.page_number, s.customer_name, s.postcode)
                    for s in analysis.orphaned_slips
                ],
                "C00000"
            )
            self._write_sheet(
                workbook.create_sheet(), "Non-standard Services",
                ('Order Number', 'Label Page', 'Service'),
                [
                    (a.order_number, a.page_number, a.service)
                    for a in analysis.non_standard_service_labels
                ],
                "C65911"
            )
            self._write_sheet(
                workbook.create_sheet(), "Unmatched Labels",
                ('Label Page', 'Customer Name', 'Postcode', 'Service'),
                [
                    (l.page_number, l.customer_name, l.postcode, l.service)
                    for l in analysis.unmatched_labels
                ],
                "7F7F7F"
            )
            self._write_sheet(
                workbook.create_sheet(), "Summary",
                ('Metric', 'Value'),
                [
                    (key.replace('_', ' ').capitalize(), value)
                    for key, value in analysis.summary.to_dict().items()
                ],
                "548235"
            )

            workbook.save(filepath)
        except OSError as e:
            logger.error(f"Report export failed: {e}")
            raise ReportExportError(str(filepath), str(e)) from e

        logger.info(f"Report saved: {filepath} ({len(analysis.groups)} orders)")
        return str(filepath)

    @staticmethod
    def _order_row(group) -> Tuple[Any, ...]:
        label = group.shipping_label
        first_slip = group.packing_slips[0]
        reasons = ()
        if label is not None:
            for candidate in group.label_candidates:
                if candidate.label.page_number == label.page_number:
                    reasons = candidate.match_reasons
                    break
        return (
            group.order_number,
            ", ".join(str(n) for n in group.page_numbers),
            label.page_number if label else None,
            first_slip.customer_name,
            first_slip.postcode,
            label.service if label else None,
            group.match_confidence.value.upper(),
            group.match_score,
            "; ".join(reasons),
        )

    @staticmethod
    def _write_sheet(sheet, title: str, headers: Sequence[str],
                     rows: List[Sequence[Any]], header_color: str) -> None:
        sheet.title = title
        header_fill = _fill(header_color)

        for col, header in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header)
            cell.font = HEADER_FONT
            cell.fill = header_fill
            cell.alignment = HEADER_ALIGNMENT
            cell.border = THIN_BORDER

        for row_num, row in enumerate(rows, 2):
            for col, value in enumerate(row, 1):
                cell = sheet.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER

        for col, header in enumerate(headers, 1):
            max_length = len(header)
            for row in rows:
                value = row[col - 1]
                if value is not None:
                    max_length = max(max_length, len(str(value)))
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

        sheet.freeze_panes = 'A2'
