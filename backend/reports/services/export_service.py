"""
Export service for inventory reports.
Supports CSV, Excel (XLSX), and PDF formats for every report type.
"""
import csv
import io
import logging
from decimal import Decimal
from typing import Dict, Any, List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from core_backend.exceptions import ValidationError

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    "csv": ("text/csv", "csv"),
    "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
    "pdf": ("application/pdf", "pdf"),
}

SKIPPED_KEYS = {"report_type", "date_range"}
PDF_ROW_LIMIT = 50


def _label(key: str) -> str:
    return key.replace("_", " ").title()


def _title(report_type: str) -> str:
    return f"{report_type.replace('-', ' ').title()} Report"


class ReportExportService:
    """Renders report payloads into downloadable files."""

    @classmethod
    def export(cls, report_data: Dict[str, Any], report_type: str, file_format: str) -> bytes:
        if file_format == "csv":
            return cls.export_to_csv(report_data, report_type)
        if file_format == "xlsx":
            return cls.export_to_xlsx(report_data, report_type)
        if file_format == "pdf":
            return cls.export_to_pdf(report_data, report_type)
        raise ValidationError(
            f"Unsupported export format {file_format!r}",
            field="file_format",
            details={"allowed": sorted(EXPORT_FORMATS)},
        )

    @staticmethod
    def _scalars(report_data):
        return [
            (key, value)
            for key, value in report_data.items()
            if key not in SKIPPED_KEYS and isinstance(value, (str, int, float, Decimal)) and not isinstance(value, bool)
        ]

    @staticmethod
    def _tables(report_data):
        return [
            (key, value)
            for key, value in report_data.items()
            if isinstance(value, list) and value and isinstance(value[0], dict)
        ]

    @classmethod
    def export_to_csv(cls, report_data: Dict[str, Any], report_type: str) -> bytes:
        """
        Export report data to CSV format.

        Returns:
            CSV file content as bytes
        """
        output = io.StringIO()
        writer = csv.writer(output)
        try:
            writer.writerow([_title(report_type)])
            if "date_range" in report_data:
                writer.writerow(["Date Range", report_data["date_range"]["start"], "to", report_data["date_range"]["end"]])
            writer.writerow([])

            for key, value in cls._scalars(report_data):
                writer.writerow([_label(key), str(value)])
            writer.writerow([])

            for key, rows in cls._tables(report_data):
                headers = list(rows[0].keys())
                writer.writerow([_label(key)])
                writer.writerow([_label(h) for h in headers])
                for row in rows:
                    writer.writerow([row.get(h, "") for h in headers])
                writer.writerow([])

            return output.getvalue().encode("utf-8")
        except Exception as e:
            logger.error(f"CSV export failed for {report_type}: {e}")
            raise
        finally:
            output.close()

    @classmethod
    def export_to_xlsx(cls, report_data: Dict[str, Any], report_type: str) -> bytes:
        """
        Export report data to Excel format.

        Returns:
            Excel file content as bytes
        """
        wb = Workbook()
        ws = wb.active
        # Excel caps sheet titles at 31 characters
        ws.title = _title(report_type)[:31]

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        try:
            row = 1
            ws.cell(row=row, column=1, value=_title(report_type)).font = Font(bold=True, size=14)
            row += 1
            if "date_range" in report_data:
                ws.cell(row=row, column=1, value="Date Range:")
                ws.cell(row=row, column=2, value=f"{report_data['date_range']['start']} to {report_data['date_range']['end']}")
                row += 1
            row += 1

            for key, value in cls._scalars(report_data):
                ws.cell(row=row, column=1, value=_label(key))
                ws.cell(row=row, column=2, value=float(value) if isinstance(value, Decimal) else value)
                row += 1
            row += 1

            for key, rows in cls._tables(report_data):
                ws.cell(row=row, column=1, value=_label(key)).font = Font(bold=True, size=12)
                row += 1
                headers = list(rows[0].keys())
                for col, header in enumerate(headers, 1):
                    cell = ws.cell(row=row, column=col, value=_label(header))
                    cell.font = header_font
                    cell.fill = header_fill
                    cell.alignment = header_alignment
                row += 1
                for item in rows:
                    for col, header in enumerate(headers, 1):
                        value = item.get(header, "")
                        if isinstance(value, Decimal):
                            value = float(value)
                        elif value is None:
                            value = ""
                        ws.cell(row=row, column=col, value=value)
                    row += 1
                row += 1

            for column in ws.columns:
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                ws.column_dimensions[get_column_letter(column[0].column)].width = min(max_length + 2, 50)

            output = io.BytesIO()
            wb.save(output)
            return output.getvalue()
        except Exception as e:
            logger.error(f"Excel export failed for {report_type}: {e}")
            raise

    @classmethod
    def export_to_pdf(cls, report_data: Dict[str, Any], report_type: str, page_size=letter) -> bytes:
        """
        Export report data to PDF format. Tables are cut at 50 rows.

        Returns:
            PDF file content as bytes
        """
        output = io.BytesIO()
        doc = SimpleDocTemplate(
            output,
            pagesize=page_size,
            leftMargin=0.75 * inch,
            rightMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
        )
        styles = getSampleStyleSheet()
        styles.add(
            ParagraphStyle(
                name="ReportTitle",
                parent=styles["Title"],
                alignment=TA_CENTER,
                fontSize=16,
                spaceAfter=30,
            )
        )

        story: List[Any] = [Paragraph(_title(report_type), styles["ReportTitle"])]
        if "date_range" in report_data:
            date_range = report_data["date_range"]
            story.append(Paragraph(f"Period: {date_range['start']} to {date_range['end']}", styles["Normal"]))
            story.append(Spacer(1, 0.2 * inch))

        try:
            for key, value in cls._scalars(report_data):
                story.append(Paragraph(f"<b>{_label(key)}:</b> {value}", styles["Normal"]))
            story.append(Spacer(1, 0.2 * inch))

            for key, rows in cls._tables(report_data):
                story.append(Paragraph(_label(key), styles["Heading2"]))
                headers = list(rows[0].keys())
                table_data = [[_label(h) for h in headers]]
                for item in rows[:PDF_ROW_LIMIT]:
                    table_data.append(["" if item.get(h) is None else str(item.get(h)) for h in headers])

                table = Table(table_data)
                table.setStyle(
                    TableStyle([
                        ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 8),
                        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                        ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
                        ("GRID", (0, 0), (-1, -1), 1, colors.black),
                    ])
                )
                story.append(table)
                story.append(Spacer(1, 0.2 * inch))

            doc.build(story)
            return output.getvalue()
        except Exception as e:
            logger.error(f"PDF export failed for {report_type}: {e}")
            raise
        finally:
            output.close()
