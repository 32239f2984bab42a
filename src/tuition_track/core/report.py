'''
Builds the class report of a tuition and renders it to PDF.

`build_report` does all the layout work (which rows land on which page and
at what height) so it can be inspected without parsing a PDF. `render_pdf`
only paints that layout with reportlab. Positions are in millimetres from
the top of an A4 page.
'''
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from ..database.db_enums import ClassActionTypeEnum
from ..database.utils import ensure_utc, utc_now

REPORT_TITLE = "TuitionTrack - Class Report"

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN_X = 20
TITLE_Y = 20
FOOTER_OFFSET = 10
ROW_HEIGHT = 10
# a row placed below this line pushes the next one onto a new page
PAGE_BREAK_Y = 270
CONTINUATION_TOP_Y = 20

# x positions of the table columns
COL_NUMBER = 25
COL_DATE = 45
COL_WEEKDAY = 95
COL_LOGGED_AT = 140


def calculate_progress(taken_classes: int, planned_classes: int) -> int:
    """
    Percentage of planned classes taken, rounded half up.
    Can exceed 100. A non-positive plan yields 0.
    """
    if planned_classes <= 0:
        return 0
    # integer form of floor(taken * 100 / planned + 0.5)
    return (taken_classes * 200 + planned_classes) // (2 * planned_classes)


def effective_class_date(event) -> datetime:
    return ensure_utc(event.class_date or event.date)


def report_filename(subject: str, student_name: Optional[str], month: Optional[str] = None) -> str:
    """`{subject}_{student}_{month or "report"}.pdf` with whitespace runs collapsed to `_`."""
    name = f"{subject}_{student_name or 'student'}_{month or 'report'}.pdf"
    return re.sub(r"\s+", "_", name)


@dataclass
class ReportRow:
    number: int
    class_date: str
    weekday: str
    logged_at: str
    y: float


@dataclass
class ReportPage:
    number: int
    rows: list[ReportRow] = field(default_factory=list)
    table_header_y: Optional[float] = None


@dataclass
class Report:
    title: str
    details: list[str]
    progress: int
    pages: list[ReportPage]
    generated_at: datetime

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def rows(self) -> list[ReportRow]:
        return [row for page in self.pages for row in page.rows]

    def footer(self, page: ReportPage) -> str:
        stamp = self.generated_at.strftime("%Y-%m-%d %H:%M UTC")
        return f"Generated on {stamp} - Page {page.number} of {self.page_count}"


def _details(tuition, progress: int) -> list[str]:
    return [
        f"Subject: {tuition.subject}",
        f"Student: {tuition.student_name or 'Not assigned'}",
        f"Teacher: {tuition.teacher_name}",
        f"Schedule: {tuition.start_time} - {tuition.end_time}",
        f"Days per Week: {tuition.days_per_week}",
        f"Planned Classes: {tuition.planned_classes_per_month}",
        f"Classes Completed: {tuition.taken_classes}",
        f"Progress: {progress}%",
    ]


def build_report(tuition, events: Iterable, generated_at: Optional[datetime] = None) -> Report:
    """
    Lays out the report. Only increment events become rows, oldest class
    first. Each page that carries rows starts with the table header.
    """
    generated_at = ensure_utc(generated_at or utc_now())
    progress = calculate_progress(tuition.taken_classes, tuition.planned_classes_per_month)
    details = _details(tuition, progress)

    attended = sorted(
        (e for e in events if e.action_type == ClassActionTypeEnum.INCREMENT.value),
        key=lambda e: (effective_class_date(e), ensure_utc(e.created_at)),
    )

    # title, "Tuition Details" heading, the detail lines, then the gap before the table
    y = TITLE_Y + 20 + 10 + 8 * len(details) + 20
    first_page = ReportPage(number=1)
    pages = [first_page]
    if not attended:
        return Report(REPORT_TITLE, details, progress, pages, generated_at)

    # "Class Log" heading, then the header row and its rule
    y += 15
    first_page.table_header_y = y
    y += 15

    page = first_page
    for number, event in enumerate(attended, start=1):
        if y > PAGE_BREAK_Y:
            page = ReportPage(number=len(pages) + 1, table_header_y=CONTINUATION_TOP_Y)
            pages.append(page)
            y = CONTINUATION_TOP_Y + 15
        when = effective_class_date(event)
        page.rows.append(ReportRow(
            number=number,
            class_date=when.strftime("%d %b %Y"),
            weekday=when.strftime("%A"),
            logged_at=ensure_utc(event.created_at).strftime("%H:%M"),
            y=y,
        ))
        y += ROW_HEIGHT

    return Report(REPORT_TITLE, details, progress, pages, generated_at)


def _pdf_y(y_mm: float) -> float:
    """reportlab measures from the bottom of the page."""
    return (PAGE_HEIGHT - y_mm) * mm


def _draw_table_header(pdf: canvas.Canvas, y: float):
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(COL_NUMBER * mm, _pdf_y(y), "#")
    pdf.drawString(COL_DATE * mm, _pdf_y(y), "Class Date")
    pdf.drawString(COL_WEEKDAY * mm, _pdf_y(y), "Day")
    pdf.drawString(COL_LOGGED_AT * mm, _pdf_y(y), "Logged At")
    pdf.line(MARGIN_X * mm, _pdf_y(y + 5), (PAGE_WIDTH - MARGIN_X) * mm, _pdf_y(y + 5))


def render_pdf(report: Report) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(report.title)

    for page in report.pages:
        if page.number == 1:
            pdf.setFont("Helvetica-Bold", 20)
            pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _pdf_y(TITLE_Y), report.title)

            y = TITLE_Y + 20
            pdf.setFont("Helvetica-Bold", 16)
            pdf.drawString(MARGIN_X * mm, _pdf_y(y), "Tuition Details")
            y += 10
            pdf.setFont("Helvetica", 12)
            for line in report.details:
                y += 8
                pdf.drawString((MARGIN_X + 5) * mm, _pdf_y(y), line)

            if page.table_header_y is not None:
                pdf.setFont("Helvetica-Bold", 16)
                pdf.drawString(MARGIN_X * mm, _pdf_y(page.table_header_y - 15), "Class Log")

        if page.table_header_y is not None:
            _draw_table_header(pdf, page.table_header_y)

        pdf.setFont("Helvetica", 10)
        for row in page.rows:
            pdf.drawString(COL_NUMBER * mm, _pdf_y(row.y), str(row.number))
            pdf.drawString(COL_DATE * mm, _pdf_y(row.y), row.class_date)
            pdf.drawString(COL_WEEKDAY * mm, _pdf_y(row.y), row.weekday)
            pdf.drawString(COL_LOGGED_AT * mm, _pdf_y(row.y), row.logged_at)

        pdf.setFont("Helvetica", 8)
        pdf.setFillGray(0.6)
        pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _pdf_y(PAGE_HEIGHT - FOOTER_OFFSET), report.footer(page))
        pdf.setFillGray(0)
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()
