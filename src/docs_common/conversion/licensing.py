import logging
import threading
from typing import BinaryIO, Callable, Generic, TypeVar

from .interfaces import LicenseConfiguration

logger = logging.getLogger(__name__)

L = TypeVar("L")
T = TypeVar("T")


class LicenseGuard(Generic[L]):
    """Holds a lazily loaded, process-wide license object.

    The guard is constructed once (typically at application startup) and
    shared by every component that needs the licensed capability. A license is
    committed only after it was created and its stream applied without error,
    so other threads never see a half-configured license.

    When no license stream is available, or loading fails, the guard stays
    unlicensed and callers keep working in evaluation mode. Every call to
    load_license() retries until a license has been committed.
    """

    def __init__(
        self,
        license_stream: Callable[[], BinaryIO | None],
        create_license: Callable[[], L],
        apply_stream: Callable[[L, BinaryIO], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        self._license_stream = license_stream
        self._create_license = create_license
        self._apply_stream = apply_stream
        self._on_error = on_error
        self._license: L | None = None
        self._lock = threading.Lock()
        self._reported_unlicensed = False

    @classmethod
    def from_configuration(cls, config: LicenseConfiguration[L]) -> "LicenseGuard[L]":
        return cls(
            license_stream=config.license_stream,
            create_license=config.create_license,
            apply_stream=config.apply_stream,
            on_error=config.log_error,
        )

    @property
    def license(self) -> L | None:
        return self._license

    @property
    def is_licensed(self) -> bool:
        return self._license is not None

    def load_license(self) -> None:
        if self._license is not None:
            return
        with self._lock:
            if self._license is not None:
                return
            try:
                stream = self._license_stream()
                if stream is None:
                    log = logger.debug if self._reported_unlicensed else logger.warning
                    log("no license available, running in evaluation mode")
                    self._reported_unlicensed = True
                    return
                try:
                    instance = self._create_license()
                    self._apply_stream(instance, stream)
                finally:
                    stream.close()
                self._license = instance
                logger.info("license loaded")
            except Exception as e:
                self._license = None
                try:
                    self._on_error(e)
                except Exception:
                    logger.exception("license error handler failed while handling: %s", e)

    def get(self, operation: Callable[[], T]) -> T:
        """Run operation in a license-aware context and return its result."""
        return operation()

    def run(self, operation: Callable[[], object]) -> None:
        """Run operation in a license-aware context."""
        operation()
