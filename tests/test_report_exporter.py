import re
from datetime import datetime, timedelta, timezone

import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from research.report_exporter import (
    PDF_MEDIA_TYPE,
    TEXT_MEDIA_TYPE,
    ReportExporter,
    strip_markdown,
    wrap_text,
)

GENERATED_AT = datetime(2024, 3, 9, 18, 0, tzinfo=timezone.utc)

REPORT = """# Climate Policy Review

## Summary
The **EU** and __US__ took *different* paths. See [the IPCC](https://ipcc.ch) and `table 2`.

```python
print("not rendered")
```
"""


@pytest.fixture
def exporter():
    return ReportExporter(product_name="DeepFastSearch")


def test_pdf_export(exporter):
    artifact = exporter.export(REPORT, GENERATED_AT)

    assert artifact.filename == "DeepFastSearch_Report_2024-03-09.pdf"
    assert artifact.media_type == PDF_MEDIA_TYPE
    assert artifact.content.startswith(b"%PDF")


def test_long_report_spans_several_pages(exporter):
    long_text = "\n".join(f"Paragraph {i}: " + "word " * 40 for i in range(120))

    artifact = exporter.export(long_text, GENERATED_AT)

    assert artifact.content.startswith(b"%PDF")
    assert len(re.findall(rb"/Type\s*/Page(?!s)", artifact.content)) > 1


def test_pdf_failure_falls_back_to_text(exporter, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("font missing")

    monkeypatch.setattr(exporter, "_render_pdf", broken)

    artifact = exporter.export(REPORT, GENERATED_AT)

    assert artifact.filename == "DeepFastSearch_Report_2024-03-09.txt"
    assert artifact.media_type == TEXT_MEDIA_TYPE
    # raw markdown, unmodified
    assert artifact.content == REPORT.encode("utf-8")


def test_text_export(exporter):
    artifact = exporter.export_text("plain", GENERATED_AT)
    assert artifact.filename.endswith("2024-03-09.txt")
    assert artifact.content == b"plain"


def test_filename_uses_utc_date(exporter):
    late_evening_west = datetime(2024, 3, 9, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert exporter.filename("pdf", late_evening_west) == "DeepFastSearch_Report_2024-03-10.pdf"


def test_strip_markdown():
    stripped = strip_markdown(REPORT)

    assert "#" not in stripped
    assert "Climate Policy Review" in stripped
    assert "The EU and US took different paths." in stripped
    assert "See the IPCC and table 2." in stripped
    assert "[Code Block]" in stripped
    assert "not rendered" not in stripped


def test_strip_markdown_keeps_inline_hash():
    assert strip_markdown("Issue #42 is open") == "Issue #42 is open"


def test_bare_heading_marker_does_not_join_lines():
    assert strip_markdown("intro\n#\nnext line") == "intro\n\nnext line"
    assert strip_markdown("## Title\nbody") == "Title\nbody"


def test_wrap_text_breaks_overlong_tokens():
    url = "https://example.org/" + "a" * 400
    max_width = 200

    lines = wrap_text(f"See {url} for details", "Helvetica", 11, max_width)

    assert len(lines) > 2
    assert all(stringWidth(line, "Helvetica", 11) <= max_width for line in lines)
    assert "".join(lines).replace(" ", "") == f"See{url}fordetails"


def test_wrap_text_keeps_blank_paragraphs():
    assert wrap_text("", "Helvetica", 11, 200) == [""]


def test_pdf_with_long_url(exporter):
    artifact = exporter.export("Source: https://example.org/" + "x" * 600, GENERATED_AT)
    assert artifact.media_type == PDF_MEDIA_TYPE
