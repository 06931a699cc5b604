"""
Exception hierarchy for pdf2slides.

Local, recoverable problems (unbalanced restores, unknown fonts, odd image
transforms) are logged where they happen and never surface here. These
exceptions end a conversion job.
"""


class Pdf2SlidesError(Exception):
    """Base exception for all conversion failures."""
    pass


class DocumentOpenError(Pdf2SlidesError):
    """Raised when the source PDF cannot be opened."""
    pass


class PageExtractionError(Pdf2SlidesError):
    """Raised when a page's operator list or text content cannot be fetched."""

    def __init__(self, page_num: int, cause: Exception):
        self.page_num = page_num
        self.cause = cause
        super().__init__(f"Failed to extract page {page_num + 1}: {cause}")


class InvalidConfigurationError(Pdf2SlidesError):
    """Raised when configuration values are invalid (e.g. unknown output mode)."""
    pass


class ConversionCancelled(Exception):
    """
    Raised when a conversion job is cancelled between pages.

    Not a Pdf2SlidesError; cancellation is an outcome, not a failure.
    """

    def __init__(self, pages_done: int = 0):
        self.pages_done = pages_done
        super().__init__(f"Conversion cancelled after {pages_done} page(s)")
