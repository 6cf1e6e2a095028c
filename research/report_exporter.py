"""Report → downloadable document (PDF, or plain text when PDF rendering fails)."""

import io
import re
from datetime import datetime, timezone

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from utils.logger import get_logger

from .contracts import ExportedArtifact

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"

MARGIN = 20 * mm
LINE_HEIGHT = 6 * mm
SECTION_GAP = 10 * mm

TITLE_FONT = ("Helvetica-Bold", 16)
DATE_FONT = ("Helvetica", 10)
BODY_FONT = ("Helvetica", 11)

CODE_BLOCK_PLACEHOLDER = "[Code Block]"

# Applied in order; fences go first so their contents are not half-stripped
_MARKDOWN_RULES = [
    (re.compile(r"```[\s\S]*?```"), CODE_BLOCK_PLACEHOLDER),
    (re.compile(r"^[ \t]*#{1,6}(?:[ \t]+|[ \t]*$)", re.MULTILINE), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"__(.*?)__"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
]


def strip_markdown(text: str) -> str:
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text


def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    """
    Word-wrap one paragraph to `max_width` points.

    Tokens wider than a whole line (long URLs) are broken by character so
    nothing runs past the margin. An empty paragraph yields one blank line.
    """
    lines = []
    for line in simpleSplit(text, font_name, font_size, max_width):
        while stringWidth(line, font_name, font_size) > max_width and len(line) > 1:
            cut = len(line) - 1
            while cut > 1 and stringWidth(line[:cut], font_name, font_size) > max_width:
                cut -= 1
            lines.append(line[:cut])
            line = line[cut:]
        lines.append(line)
    return lines or [""]


class ReportExporter:
    """
    Builds downloadable artifacts named `{product}_Report_{YYYY-MM-DD}.{pdf|txt}`.
    """

    def __init__(self, product_name: str = "DeepFastSearch"):
        self.product_name = product_name

    def filename(self, extension: str, generated_at: datetime | None = None) -> str:
        stamp = (generated_at or datetime.now(timezone.utc)).astimezone(timezone.utc).date().isoformat()
        return f"{self.product_name}_Report_{stamp}.{extension}"

    def export(self, report_text: str, generated_at: datetime | None = None) -> ExportedArtifact:
        """PDF of the report; on any rendering failure, the raw text as a .txt file."""
        generated_at = generated_at or datetime.now(timezone.utc)
        try:
            content = self._render_pdf(report_text, generated_at)
        except Exception as e:
            logger.error(
                "PDF rendering failed, exporting plain text",
                exc_info=True,
                extra={"extra_fields": {"error_type": type(e).__name__}},
            )
            return self.export_text(report_text, generated_at)

        return ExportedArtifact(
            filename=self.filename("pdf", generated_at),
            content=content,
            media_type=PDF_MEDIA_TYPE,
        )

    def export_text(self, report_text: str, generated_at: datetime | None = None) -> ExportedArtifact:
        return ExportedArtifact(
            filename=self.filename("txt", generated_at),
            content=report_text.encode("utf-8"),
            media_type=TEXT_MEDIA_TYPE,
        )

    def _render_pdf(self, report_text: str, generated_at: datetime) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"{self.product_name} Research Report")
        page_width, page_height = A4
        max_line_width = page_width - 2 * MARGIN

        # y is the offset from the top edge; reportlab draws from the bottom
        def add_text(text: str, y: float, font: tuple[str, int]) -> float:
            name, size = font
            pdf.setFont(name, size)
            for paragraph in text.split("\n"):
                for line in wrap_text(paragraph, name, size, max_line_width):
                    if y > page_height - MARGIN:
                        pdf.showPage()
                        pdf.setFont(name, size)
                        y = MARGIN
                    pdf.drawString(MARGIN, page_height - y, line)
                    y += LINE_HEIGHT
            return y

        y = add_text(f"{self.product_name} Research Report", MARGIN, TITLE_FONT) + SECTION_GAP
        y = add_text(f"Generated: {generated_at.date().isoformat()}", y, DATE_FONT) + SECTION_GAP
        add_text(strip_markdown(report_text), y, BODY_FONT)

        pdf.save()
        return buffer.getvalue()
