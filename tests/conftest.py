from pathlib import Path

import pytest

from docs_common.conversion import Converter

TEST_CONTENT = "Test document content"
CONVERTED_CONTENT = "CONVERTED: Test document content"
PDF_FORMAT = 1
OTHER_FORMAT = 2


class PrefixStrategy:
    """Text strategy whose output is the document prefixed with 'CONVERTED: '."""

    pdf_format = PDF_FORMAT

    def __init__(self) -> None:
        self.fail_on_load = False
        self.fail_on_save = False
        self.saved_formats: list[int] = []

    def load_from_stream(self, stream):
        if self.fail_on_load:
            raise IOError("Test exception")
        return stream.read().decode("utf-8")

    def load_from_path(self, path):
        if self.fail_on_load:
            raise IOError("Test exception")
        return Path(path).read_text(encoding="utf-8")

    def save_to_stream(self, document, sink, fmt):
        if self.fail_on_save:
            raise IOError("Test save exception")
        self.saved_formats.append(fmt)
        sink.write(f"CONVERTED: {document}".encode("utf-8"))

    def save_to_path(self, document, path, fmt):
        if self.fail_on_save:
            raise IOError("Test save exception")
        self.saved_formats.append(fmt)
        Path(path).write_bytes(f"CONVERTED: {document}".encode("utf-8"))


@pytest.fixture
def strategy() -> PrefixStrategy:
    return PrefixStrategy()


@pytest.fixture
def converter(strategy) -> Converter:
    return Converter(strategy)


@pytest.fixture
def source_file(tmp_path) -> Path:
    p = tmp_path / "test.txt"
    p.write_text(TEST_CONTENT, encoding="utf-8")
    return p
