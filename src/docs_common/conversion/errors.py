class ConversionStateError(RuntimeError):
    """Raised when converter operations are called in the wrong order."""


class DocumentConversionError(RuntimeError):
    """Wraps a failure while loading, converting or saving a document.

    The underlying failure is kept as ``__cause__`` (see :attr:`cause`).
    When only a cause is given, the message is derived from it.
    """

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        if message is None and cause is not None:
            message = f"{type(cause).__name__}: {cause}"
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str | None:
        return self.args[0] if self.args else None

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class LicenseInitializationError(RuntimeError):
    """Raised by license material that cannot be read or applied."""
