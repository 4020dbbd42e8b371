import hashlib
import io
import json
import logging
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO
from xml.sax.saxutils import escape

from .errors import LicenseInitializationError

logger = logging.getLogger(__name__)


class OutputFormat(IntEnum):
    PDF = 1
    TEXT = 2
    MARKDOWN = 3
    HTML = 4
    JSON = 5

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown output format: {name}") from None


MEDIA_TYPES = {
    OutputFormat.PDF: "application/pdf",
    OutputFormat.TEXT: "text/plain",
    OutputFormat.MARKDOWN: "text/markdown",
    OutputFormat.HTML: "text/html",
    OutputFormat.JSON: "application/json",
}


def render_pdf(text: str, sink: BinaryIO, *, title: str | None = None) -> None:
    """Lay out text as PDF paragraphs (blank-line separated) into sink.

    Uses ReportLab's invariant mode, so the same text always renders to the
    same bytes.
    """
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        sink,
        pagesize=A4,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        invariant=1,
    )
    story = []
    if title:
        story.append(Paragraph(escape(title), styles["Title"]))
    story.append(Spacer(1, 12))
    for para in text.split("\n\n"):
        if para.strip():
            story.append(Paragraph(escape(para).replace("\n", "<br/>"), styles["Normal"]))
            story.append(Spacer(1, 6))
    doc.build(story)


class PlainTextStrategy:
    """Documents are decoded text; saves text, markdown or a rendered PDF."""

    pdf_format = OutputFormat.PDF

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def load_from_stream(self, stream: BinaryIO) -> str:
        return stream.read().decode(self._encoding)

    def load_from_path(self, path: str) -> str:
        return Path(path).read_text(encoding=self._encoding)

    def save_to_stream(self, document: str, sink: BinaryIO, fmt: int) -> None:
        if fmt == OutputFormat.PDF:
            render_pdf(document, sink)
        elif fmt in (OutputFormat.TEXT, OutputFormat.MARKDOWN):
            sink.write(document.encode(self._encoding))
        else:
            raise ValueError(f"plain text documents cannot be saved as format {fmt}")

    def save_to_path(self, document: str, path: str, fmt: int) -> None:
        with open(path, "wb") as f:
            self.save_to_stream(document, f, fmt)


class DoclingStrategy:
    """Documents are Docling documents (PDF, DOCX, PPTX, XLSX, ... inputs).

    Stream input carries no file name, so Docling detects the input format
    from source_name.
    """

    pdf_format = OutputFormat.PDF

    def __init__(self, source_name: str = "document.pdf") -> None:
        self._source_name = source_name

    def load_from_stream(self, stream: BinaryIO):
        from docling.datamodel.base_models import DocumentStream

        source = DocumentStream(name=self._source_name, stream=io.BytesIO(stream.read()))
        return self._convert(source)

    def load_from_path(self, path: str):
        return self._convert(path)

    def save_to_stream(self, document, sink: BinaryIO, fmt: int) -> None:
        if fmt == OutputFormat.MARKDOWN:
            sink.write(self._export(document, "export_to_markdown", "to_markdown").encode("utf-8"))
        elif fmt == OutputFormat.HTML:
            sink.write(self._export(document, "export_to_html").encode("utf-8"))
        elif fmt == OutputFormat.TEXT:
            sink.write(self._export(document, "export_to_text", "export_to_markdown").encode("utf-8"))
        elif fmt == OutputFormat.JSON:
            data = self._export(document, "export_to_dict")
            sink.write(json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8"))
        elif fmt == OutputFormat.PDF:
            render_pdf(self._export(document, "export_to_markdown", "to_markdown"), sink)
        else:
            raise ValueError(f"docling documents cannot be saved as format {fmt}")

    def save_to_path(self, document, path: str, fmt: int) -> None:
        with open(path, "wb") as f:
            self.save_to_stream(document, f, fmt)

    @staticmethod
    def _convert(source):
        from docling.document_converter import DocumentConverter

        result = DocumentConverter().convert(source)
        # generic extraction across variants
        doc = getattr(result, "document", None)
        if doc is None:
            to_doc = getattr(result, "to_doc", None)
            if not callable(to_doc):
                raise RuntimeError("Unexpected result type from Docling converter")
            doc = to_doc()
        return doc

    @staticmethod
    def _export(document, *methods: str):
        for m in methods:
            fn = getattr(document, m, None)
            if callable(fn):
                return fn()
        raise RuntimeError(f"Doc object lacks export method ({', '.join(methods)})")


class KeyLicense:
    """License record holding raw key material and its SHA-256 fingerprint."""

    def __init__(self) -> None:
        self.key: bytes | None = None
        self.fingerprint: str | None = None

    def set_license(self, stream: BinaryIO) -> None:
        raw = stream.read()
        if not raw or not raw.strip():
            raise LicenseInitializationError("license stream is empty")
        self.key = raw
        self.fingerprint = hashlib.sha256(raw).hexdigest()


class FileLicenseSource:
    """Supplies the license file at path, or None when there is none."""

    def __init__(self, path: str | None) -> None:
        self._path = Path(path) if path else None
        self._reported_missing = False

    def __call__(self) -> BinaryIO | None:
        if self._path is None:
            return None
        if not self._path.is_file():
            log = logger.debug if self._reported_missing else logger.warning
            log("license file %s not found", self._path)
            self._reported_missing = True
            return None
        return self._path.open("rb")


class FileLicenseConfiguration:
    def __init__(self, path: str | None) -> None:
        self._source = FileLicenseSource(path)

    def license_stream(self) -> BinaryIO | None:
        return self._source()

    def create_license(self) -> KeyLicense:
        return KeyLicense()

    def apply_stream(self, license: KeyLicense, stream: BinaryIO) -> None:
        license.set_license(stream)

    def log_error(self, error: Exception) -> None:
        logger.error("failed to load license, continuing in evaluation mode: %s", error, exc_info=error)
