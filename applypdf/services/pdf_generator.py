"""
PDF Generator Service
Renders an application submission into a fixed-layout PDF with reportlab
"""
import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from applypdf.core.errors import AppError, pdf_generation_error
from applypdf.schemas import SubmissionRecord, UploadedFileInfo, UserRecord
from applypdf.utils.file_handler import format_size_mb

logger = logging.getLogger(__name__)

MARGIN = 35
FOOTER_Y = 30
LABEL_WIDTH = 80
NOT_AVAILABLE = "N/A"


def _footer_canvas(footer_text: str):
    """
    Canvas class that stamps the footer on every page

    Pages are buffered until save() so the total page count is known.
    """

    class FooterCanvas(canvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._page_states = []

        def showPage(self):
            self._page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total_pages = len(self._page_states)
            for state in self._page_states:
                self.__dict__.update(state)
                self._draw_footer(total_pages)
                super().showPage()
            super().save()

        def _draw_footer(self, total_pages: int):
            width, _ = self._pagesize
            self.saveState()
            self.setFont("Helvetica", 9)
            self.setFillColor(colors.HexColor("#666666"))
            self.drawString(MARGIN, FOOTER_Y, footer_text)
            self.drawRightString(width - MARGIN, FOOTER_Y, f"Page {self._pageNumber} of {total_pages}")
            self.restoreState()

    return FooterCanvas


class PdfGeneratorService:
    """Lays out an application: header, applicant details, job description, resume"""

    def __init__(self, title: str = "JOB APPLICATION FORM", position_title: str = "Software Engineer - Full Stack Developer"):
        self.title = title
        self.position_title = position_title
        self.styles = self._build_styles()

    def render(
        self,
        submission: SubmissionRecord,
        user: UserRecord,
        uploaded_files: Optional[Sequence[UploadedFileInfo]] = None,
        generated_at: Optional[datetime] = None
    ) -> bytes:
        """
        Render a submission to PDF bytes

        Args:
            submission: Submission to render; its job description is used verbatim
            user: Owning user
            uploaded_files: Attached files listed in the RESUME section
            generated_at: Timestamp printed in the footer; defaults to now

        Returns:
            bytes: The PDF document

        Raises:
            AppError: PDF_GENERATION if the document cannot be built
        """
        generated_at = generated_at or datetime.now()
        buffer = io.BytesIO()

        try:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=A4,
                leftMargin=MARGIN,
                rightMargin=MARGIN,
                topMargin=MARGIN,
                bottomMargin=MARGIN + 25,
                title=f"Job Application - {user.first_name} {user.last_name}",
                author=f"{user.first_name} {user.last_name}",
                subject=self.position_title,
            )
            story = self._build_story(submission, user, uploaded_files or [])
            footer = f"This application was generated on {generated_at.strftime('%B %d, %Y at %I:%M %p')}"
            doc.build(story, canvasmaker=_footer_canvas(footer))
        except AppError:
            raise
        except Exception as e:
            logger.error(f"PDF rendering failed for submission {submission.id}: {e}", exc_info=True)
            raise pdf_generation_error(f"Failed to generate PDF: {e}") from e

        pdf_bytes = buffer.getvalue()
        logger.info(f"Rendered PDF for submission {submission.id} ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    def _build_story(self, submission: SubmissionRecord, user: UserRecord, uploaded_files: Sequence[UploadedFileInfo]) -> List:
        s = self.styles
        story: List = [
            Paragraph(escape(self.title), s["DocTitle"]),
            HRFlowable(width="100%", thickness=1, color=colors.black, spaceBefore=4, spaceAfter=12),
            Paragraph(f"Date: {submission.created_at.strftime('%b %d, %Y')}", s["DateLine"]),
            Spacer(1, 12),
        ]

        story += self._section("PERSONAL INFORMATION")
        story.append(self._field_table([
            ("First Name:", user.first_name or NOT_AVAILABLE, "Last Name:", user.last_name or NOT_AVAILABLE),
        ]))

        story += self._section("CONTACT INFORMATION")
        story.append(self._field_table([
            ("Email:", user.email or NOT_AVAILABLE),
            ("Phone:", user.phone or NOT_AVAILABLE),
        ]))

        story += self._section("POSITION APPLIED FOR")
        story.append(self._field_table([("Position:", self.position_title)]))

        story += self._section("JOB DESCRIPTION")
        description = escape(submission.job_description).replace("\n", "<br/>")
        story.append(Paragraph(description, s["JobDescription"]))

        if uploaded_files:
            story += self._section("RESUME")
            for info in uploaded_files:
                rows = [("File Name:", info.original_name)]
                if info.file_size:
                    rows.append(("File Size:", format_size_mb(info.file_size)))
                rows.append(("Status:", "Successfully Uploaded"))
                story.append(self._field_table(rows))
                story.append(Spacer(1, 4))

        return story

    def _section(self, heading: str) -> List:
        return [
            Spacer(1, 10),
            Paragraph(heading, self.styles["SectionTitle"]),
            HRFlowable(width="100%", thickness=0.75, color=colors.black, spaceBefore=1, spaceAfter=6),
        ]

    def _field_table(self, rows) -> Table:
        """Label/value rows; a row may hold several label/value pairs"""
        s = self.styles
        data = []
        for row in rows:
            cells = []
            for index, text in enumerate(row):
                style = s["FieldLabel"] if index % 2 == 0 else s["FieldValue"]
                cells.append(Paragraph(escape(str(text)), style))
            data.append(cells)

        pairs = max(len(row) for row in rows) // 2
        available = A4[0] - 2 * MARGIN
        value_width = available / pairs - LABEL_WIDTH
        table = Table(data, colWidths=[LABEL_WIDTH, value_width] * pairs, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        return table

    @staticmethod
    def _build_styles():
        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            "DocTitle", parent=styles["Title"], fontName="Helvetica-Bold", fontSize=16, alignment=TA_CENTER
        ))
        styles.add(ParagraphStyle(
            "DateLine", parent=styles["Normal"], fontSize=10, alignment=TA_RIGHT
        ))
        styles.add(ParagraphStyle(
            "SectionTitle", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=11, spaceAfter=2
        ))
        styles.add(ParagraphStyle(
            "FieldLabel", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=10
        ))
        styles.add(ParagraphStyle(
            "FieldValue", parent=styles["Normal"], fontSize=10
        ))
        styles.add(ParagraphStyle(
            "JobDescription", parent=styles["Normal"], fontSize=10, leading=14, alignment=TA_JUSTIFY
        ))
        return styles
