import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Generic, TypeVar

from .errors import ConversionStateError, DocumentConversionError
from .interfaces import DocumentStrategy

logger = logging.getLogger(__name__)

D = TypeVar("D")
F = TypeVar("F")

NO_DOCUMENT_MESSAGE = "No source document set. Call from_*() or load() first."
NO_FORMAT_MESSAGE = "No target format set. Call to() or to_pdf() first."


class Converter(Generic[D, F]):
    """Fluent conversion pipeline: source -> in-memory document -> target format -> output.

    The document-type specific work is delegated to a DocumentStrategy, so a
    concrete converter is just a Converter built around a strategy:

        pdf = Converter(PlainTextStrategy()).from_path("notes.txt").to_pdf().as_bytes()

    Output methods do not change the converter state and may be called
    repeatedly. Instances are meant for a single thread of work.
    """

    def __init__(self, strategy: DocumentStrategy[D, F]) -> None:
        self._strategy = strategy
        self._document: D | None = None
        self._target_format: F | None = None

    @property
    def document(self) -> D | None:
        return self._document

    @property
    def target_format(self) -> F | None:
        return self._target_format

    # Source binding

    def from_stream(self, stream: BinaryIO) -> "Converter[D, F]":
        try:
            self._document = self._strategy.load_from_stream(stream)
        except Exception as e:
            raise DocumentConversionError("Failed to load document") from e
        return self

    def from_file(self, path: "os.PathLike[str]") -> "Converter[D, F]":
        try:
            self._document = self._strategy.load_from_path(str(Path(path).absolute()))
        except Exception as e:
            raise DocumentConversionError("Failed to load document from file") from e
        return self

    def from_path(self, path: str) -> "Converter[D, F]":
        try:
            self._document = self._strategy.load_from_path(path)
        except Exception as e:
            raise DocumentConversionError("Failed to load document from path") from e
        return self

    def from_bytes(self, data: bytes | bytearray | memoryview) -> "Converter[D, F]":
        try:
            self._document = self._strategy.load_from_stream(io.BytesIO(bytes(data)))
        except Exception as e:
            raise DocumentConversionError("Failed to load document from byte array") from e
        return self

    def load(self, source: object) -> "Converter[D, F]":
        """Bind a source of any supported kind: bytes, str path, os.PathLike or readable stream."""
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.from_bytes(source)
        if isinstance(source, str):
            return self.from_path(source)
        if isinstance(source, os.PathLike):
            return self.from_file(source)
        if callable(getattr(source, "read", None)):
            return self.from_stream(source)  # type: ignore[arg-type]
        raise TypeError(f"unsupported document source: {type(source).__name__}")

    # Target format

    def to(self, fmt: F) -> "Converter[D, F]":
        if self._document is None:
            raise ConversionStateError(NO_DOCUMENT_MESSAGE)
        self._target_format = fmt
        return self

    def to_pdf(self) -> "Converter[D, F]":
        return self.to(self._strategy.pdf_format)

    # Output

    def as_bytes(self) -> bytes:
        document, fmt = self._require_ready()
        sink = io.BytesIO()
        try:
            self._strategy.save_to_stream(document, sink, fmt)
        except Exception as e:
            raise DocumentConversionError("Failed to convert document") from e
        data = sink.getvalue()
        logger.debug("converted document to format %r (%d bytes)", fmt, len(data))
        return data

    def as_file(self, output_path: "str | os.PathLike[str]") -> Path:
        """Write the converted document to output_path, creating missing parent directories."""
        if not isinstance(output_path, str):
            return self.as_file(str(Path(output_path).absolute()))
        document, fmt = self._require_ready()
        out = Path(output_path)
        parent = out.parent
        if not parent.exists():
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DocumentConversionError(f"Failed to create parent directory: {parent.absolute()}") from e
        try:
            self._strategy.save_to_path(document, output_path, fmt)
        except Exception as e:
            raise DocumentConversionError("Failed to save converted document") from e
        logger.debug("saved converted document to %s", out)
        return out

    def as_stream(self) -> io.BytesIO:
        """Return the converted bytes as a new stream; the caller owns and closes it."""
        return io.BytesIO(self.as_bytes())

    def _require_ready(self) -> tuple[D, F]:
        if self._document is None:
            raise ConversionStateError(NO_DOCUMENT_MESSAGE)
        if self._target_format is None:
            raise ConversionStateError(NO_FORMAT_MESSAGE)
        return self._document, self._target_format
