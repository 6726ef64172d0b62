from .export import ExportFormat, ExportService
from .parsing import AmountParser, DateParser

__all__ = [
    "AmountParser",
    "DateParser",
    "ExportFormat",
    "ExportService",
]
