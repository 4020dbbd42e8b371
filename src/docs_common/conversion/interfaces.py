from typing import BinaryIO, Protocol, TypeVar

D = TypeVar("D")
F = TypeVar("F")
L = TypeVar("L")
C = TypeVar("C", covariant=True)


class DocumentStrategy(Protocol[D, F]):
    """Document-type specific load/save operations used by a Converter.

    Implementations may raise anything; the converter wraps failures into
    DocumentConversionError.
    """

    @property
    def pdf_format(self) -> F:
        ...

    def load_from_stream(self, stream: BinaryIO) -> D:
        ...

    def load_from_path(self, path: str) -> D:
        ...

    def save_to_stream(self, document: D, sink: BinaryIO, fmt: F) -> None:
        ...

    def save_to_path(self, document: D, path: str, fmt: F) -> None:
        ...


class LicenseConfiguration(Protocol[L]):
    def license_stream(self) -> BinaryIO | None:
        """Return the license material, or None to run in evaluation mode."""

    def create_license(self) -> L:
        ...

    def apply_stream(self, license: L, stream: BinaryIO) -> None:
        ...

    def log_error(self, error: Exception) -> None:
        ...


class ConverterFactory(Protocol[C]):
    def create_converter(self) -> C:
        ...
