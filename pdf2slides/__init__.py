"""
pdf2slides - Rebuild PDF pages as PowerPoint slides with editable text.
"""

from .converter import PDFToPPTXConverter, CancellationToken, ConversionResult
from .exceptions import (
    Pdf2SlidesError,
    DocumentOpenError,
    PageExtractionError,
    InvalidConfigurationError,
    ConversionCancelled,
)
from .rebuilder.coordinate_mapper import OutputMode

__version__ = '1.0.0'

__all__ = [
    'PDFToPPTXConverter',
    'CancellationToken',
    'ConversionResult',
    'OutputMode',
    'Pdf2SlidesError',
    'DocumentOpenError',
    'PageExtractionError',
    'InvalidConfigurationError',
    'ConversionCancelled',
]
