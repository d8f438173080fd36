"""
Export functionality for EasyHome
"""

from .service import ExportError, ExportFormat, ExportService

__all__ = [
    "ExportError",
    "ExportFormat",
    "ExportService",
]
