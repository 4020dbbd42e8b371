from typing import Callable, Generic, TypeVar

from .interfaces import ConverterFactory
from .licensing import LicenseGuard

C = TypeVar("C")
T = TypeVar("T")


class LicensedConverterFactory(Generic[C]):
    """Entry point handing out fresh converters behind a shared LicenseGuard.

    Several factories (one per document library) can share one guard. The
    guard is consulted before every converter is handed out, which is a no-op
    once a license has been committed.

    converters is either a ConverterFactory or a plain zero-argument callable.
    """

    def __init__(self, guard: LicenseGuard, converters: "ConverterFactory[C] | Callable[[], C]") -> None:
        self._guard = guard
        self._create_converter: Callable[[], C] = getattr(converters, "create_converter", converters)

    @property
    def guard(self) -> LicenseGuard:
        return self._guard

    def create_converter(self) -> C:
        return self.convert()

    def convert(self) -> C:
        self._guard.load_license()
        return self._create_converter()

    def get(self, operation: Callable[[], T]) -> T:
        return self._guard.get(operation)

    def run(self, operation: Callable[[], object]) -> None:
        self._guard.run(operation)
