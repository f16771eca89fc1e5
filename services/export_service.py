"""Export service - plain text, markdown and DOCX exports of generated documents.

Text exports are open to every plan; DOCX is gated behind the
`export_formats` entitlement.
"""

import logging
import re
from datetime import datetime
from pathlib import Path

from docx import Document
from docx.shared import Inches, Pt, RGBColor

import entitlements

from .exceptions import ExportFailedError, ValidationError
from .models import ExportFormat, Outputs, SubscriptionProfile

logger = logging.getLogger(__name__)

EXPORTABLE_DOCUMENTS = {
    "resume": "Resume",
    "cover_letter": "Cover Letter",
    "highlights": "Recruiter Highlights",
    "kpi_tracker": "Weekly KPI Tracker",
}

_PLAIN_TEXT_RULES = [
    (re.compile(r"#{1,6}\s*"), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), "• "),
    (re.compile(r"\n{3,}"), "\n\n"),
]

_BOLD = re.compile(r"\*\*(.+?)\*\*")


# =============================================================================
# Text formatting
# =============================================================================


def to_plain_text(content: str) -> str:
    """Strip markdown syntax, normalise bullets and collapse blank runs."""
    for pattern, replacement in _PLAIN_TEXT_RULES:
        content = pattern.sub(replacement, content)
    return content.strip()


def to_markdown(content: str, title: str = "Resume") -> str:
    """Return content as markdown, adding a title heading if it has none."""
    if "#" in content or "**" in content:
        return content
    return f"# {title}\n\n{content}"


def format_export_content(
    title: str,
    content: str,
    fmt: ExportFormat,
    generated_at: datetime | None = None,
    settings: dict | None = None,
    word_count: int | None = None,
) -> str:
    """Prefix content with a metadata header and format it for export."""
    header = [title.upper(), ""]
    if generated_at:
        header.append(f"Generated: {generated_at.strftime('%Y-%m-%d')}")
    if settings:
        header.append("Settings: " + " • ".join(f"{k}: {v}" for k, v in settings.items()))
    if word_count:
        header.append(f"Word Count: {word_count}")
    header += ["", "─" * 50, "", ""]

    body = to_markdown(content, title) if fmt == ExportFormat.MD else to_plain_text(content)
    return "\n".join(header) + body


def generate_filename(base_name: str, extension: str, today: datetime | None = None) -> str:
    """e.g. "resume-2026-10-19.md"."""
    return f"{base_name}-{(today or datetime.now()).strftime('%Y-%m-%d')}.{extension}"


def validate_resume_length(content: str) -> dict:
    """Whether a résumé is likely to fit on one page."""
    word_count = len(content.split())
    if word_count <= 400:
        return {"word_count": word_count, "is_optimal": True, "recommendation": "Perfect length for one page"}
    if word_count <= 550:
        return {"word_count": word_count, "is_optimal": True, "recommendation": "Good length, may fit on one page"}
    return {
        "word_count": word_count,
        "is_optimal": False,
        "recommendation": "Consider shortening for better print layout",
    }


def document_text(outputs: Outputs, document: str) -> str:
    """Text of one generated document.

    Raises:
        ValidationError: For an unknown document or one not generated yet.
    """
    if document not in EXPORTABLE_DOCUMENTS:
        raise ValidationError(f"Unknown document: {document}", field="document")

    if document == "resume":
        text = outputs.current_resume()
    elif document == "cover_letter":
        text = outputs.cover_letter
    elif document == "highlights":
        text = "\n".join(f"- {h}" for h in outputs.highlights)
    else:
        text = outputs.weekly_kpi_tracker

    if not text:
        raise ValidationError(f"Nothing to export: {document} has not been generated", field="document")
    return text


# =============================================================================
# DOCX
# =============================================================================


def export_docx(content: str, path: Path) -> Path:
    """Render markdown-ish text to a DOCX file.

    Raises:
        ExportFailedError: If the document cannot be written.
    """
    doc = Document()
    for section in doc.sections:
        section.top_margin = Inches(0.5)
        section.bottom_margin = Inches(0.5)
        section.left_margin = Inches(0.6)
        section.right_margin = Inches(0.6)

    normal = doc.styles["Normal"]
    normal.font.name = "Arial"
    normal.font.size = Pt(10)
    normal.font.color.rgb = RGBColor(0x33, 0x33, 0x33)

    for raw_line in re.sub(r"^•[ \t]*", "- ", content, flags=re.MULTILINE).splitlines():
        line = raw_line.strip()
        if not line or line in ("---", "***", "___"):
            continue

        heading = re.match(r"^(#{1,3})\s+(.*)$", line)
        if heading:
            level = len(heading.group(1))
            text = heading.group(2).strip()
            _add_runs(doc.add_heading(level=level), text.upper() if level == 2 else text)
        elif line.startswith(("- ", "* ")):
            _add_runs(doc.add_paragraph(style="List Bullet"), line[2:].strip())
        else:
            _add_runs(doc.add_paragraph(), line)

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(path))
    except OSError as e:
        logger.error("DOCX export to %s failed: %s", path, e)
        raise ExportFailedError("docx", str(e)) from e
    return path


def _add_runs(paragraph, text: str) -> None:
    """Add text to a paragraph, turning **bold** spans into bold runs."""
    pos = 0
    for match in _BOLD.finditer(text):
        if match.start() > pos:
            paragraph.add_run(text[pos:match.start()])
        paragraph.add_run(match.group(1)).bold = True
        pos = match.end()
    if pos < len(text):
        paragraph.add_run(text[pos:])


# =============================================================================
# Service
# =============================================================================


class ExportService:
    """Writes generated documents to an output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def render(
        self,
        outputs: Outputs,
        document: str,
        fmt: ExportFormat,
        settings: dict | None = None,
        generated_at: datetime | None = None,
    ) -> str:
        """Text export of a document (md or txt)."""
        text = document_text(outputs, document)
        return format_export_content(
            EXPORTABLE_DOCUMENTS[document],
            text,
            fmt,
            generated_at=generated_at,
            settings=settings,
            word_count=len(text.split()),
        )

    def export(
        self,
        outputs: Outputs,
        document: str,
        fmt: ExportFormat,
        profile: SubscriptionProfile | None = None,
        settings: dict | None = None,
        generated_at: datetime | None = None,
    ) -> Path:
        """Write a document to the output directory.

        Returns:
            Path of the written file.

        Raises:
            ValidationError: If the document is unknown or empty.
            SubscriptionRequiredError: For DOCX without a Pro plan.
            ExportFailedError: If the file cannot be written.
        """
        base_name = document.replace("_", "-")
        if fmt == ExportFormat.DOCX:
            entitlements.require_access("export_formats", profile)
            path = self.output_dir / generate_filename(base_name, "docx", generated_at)
            export_docx(document_text(outputs, document), path)
        else:
            path = self.output_dir / generate_filename(base_name, fmt.value, generated_at)
            content = self.render(outputs, document, fmt, settings=settings, generated_at=generated_at)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
            except OSError as e:
                raise ExportFailedError(fmt.value, str(e)) from e

        logger.info("Exported %s to %s", document, path)
        return path
