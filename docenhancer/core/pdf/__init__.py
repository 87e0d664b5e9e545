"""
PDF handling: embedded image extraction.
"""

from docenhancer.core.pdf.images import ExtractedImage, ImageExtractionResult, PdfImageExtractor

__all__ = ["ExtractedImage", "ImageExtractionResult", "PdfImageExtractor"]
