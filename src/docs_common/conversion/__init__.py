"""
Domain layer for document conversion.
Provides the fluent Converter pipeline, the shared LicenseGuard and the
license-gated factory, plus interfaces (strategies) so concrete document
libraries can plug in without changing the pipeline.
"""

from .interfaces import DocumentStrategy, LicenseConfiguration, ConverterFactory
from .errors import ConversionStateError, DocumentConversionError, LicenseInitializationError
from .converter import Converter
from .licensing import LicenseGuard
from .service import LicensedConverterFactory
