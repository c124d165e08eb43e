"""
Input Handler Module for the Slip Matching System.

Page text sources: in-memory page strings and pdfplumber-backed PDFs.
"""

from .text_source import PageTextSource, InMemoryTextSource, PDFTextSource, words_to_text

__all__ = ['PageTextSource', 'InMemoryTextSource', 'PDFTextSource', 'words_to_text']
