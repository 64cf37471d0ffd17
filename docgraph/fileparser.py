import re
import logging
from pathlib import Path
from typing import List, Tuple, Dict, Any

import fitz

from docgraph import utils as ut

LOGGER = logging.getLogger(__name__)


class DocumentParseError(Exception):
    """Raised when uploaded bytes cannot be turned into page text."""


class FileParser:
    """
    A parser for uploaded document bytes (.pdf, .txt, .md) that returns
    pages and metadata in a standardized format.
    """

    SUPPORTED_EXTENSIONS = {'.pdf', '.txt', '.md'}

    def parse_bytes(self, data: bytes, filename: str) -> Tuple[List[Tuple[int, str]], Dict[str, Any]]:
        """
        Parse uploaded bytes and return (pages, metadata) tuple.

        Args:
            data: Raw file content
            filename: Name of the uploaded file, used to pick the parser

        Returns:
            Tuple containing:
            - pages: List of (page_number, content) tuples (1-based)
            - metadata: Dictionary with filename, size, extension and language

        Raises:
            DocumentParseError: If the extension is unsupported or the content is unreadable
        """
        extension = Path(filename).suffix.lower()
        if extension not in self.SUPPORTED_EXTENSIONS:
            raise DocumentParseError(f"Unsupported file extension: {extension or '(none)'}. "
                                     f"Supported extensions: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}")
        if not data:
            raise DocumentParseError(f"Empty upload: {filename}")

        metadata: Dict[str, Any] = {
            'filename': filename,
            'file_size': len(data),
            'extension': extension,
        }

        try:
            if extension == '.pdf':
                pages, file_metadata = self._parse_pdf_bytes(data)
            else:
                pages, file_metadata = self._parse_text_bytes(data)
        except DocumentParseError:
            raise
        except Exception as e:
            raise DocumentParseError(f"Error parsing file {filename}: {e}") from e

        metadata.update(file_metadata)
        LOGGER.info("Parsed %s: %d page(s), language=%s", filename, len(pages), metadata.get('language'))
        return pages, metadata

    def _parse_text_bytes(self, data: bytes) -> Tuple[List[Tuple[int, str]], Dict[str, Any]]:
        """Parse text uploads (.txt, .md)"""
        raw_text = data.decode('utf-8', errors='replace')
        # text files do not have multiple pages
        pages = [(1, raw_text)]
        metadata = {"language": ut.detect_language(raw_text)}
        return pages, metadata

    def _parse_pdf_bytes(self, data: bytes) -> Tuple[List[Tuple[int, str]], Dict[str, Any]]:
        """
        Parse a PDF into [(page_no, text), ...] with 1-based page numbers.
        - Block-level filtering (skip headers/footers and page numbers).
        - Aggregates ONE string per page (paragraphs separated by blank line).
        - Detects language from the longest page.
        """
        doc = fitz.open(stream=data, filetype="pdf")
        pages: List[Tuple[int, str]] = []
        longest_text: str = ""

        try:
            for i, page in enumerate(doc.pages()):
                rect = page.rect
                header_y = rect.height * 0.07   # top 7% likely header
                footer_y = rect.height * 0.93   # bottom 7% likely footer

                paragraphs: List[str] = []
                # PyMuPDF "blocks": (x0, y0, x1, y1, text, block_no, block_type, ...)
                for block in page.get_text("blocks"):
                    if len(block) < 7:
                        continue
                    _x0, y0, _x1, y1, txt, _bno, btype = block[:7]

                    # Only text blocks
                    if btype != 0:
                        continue

                    block_text = (txt or "").strip()
                    if not block_text:
                        continue

                    # Page number patterns: "12", "12.", "3/12", "Page 3"
                    if re.match(r'^\s*\d+([.\-–]|\s+)?\s*$', block_text):
                        continue
                    if re.match(r'^\s*\d+\s*/\s*\d+\s*$', block_text):
                        continue
                    if re.match(r'^\s*page\s+\d+\s*$', block_text, re.IGNORECASE):
                        continue
                    # Likely header/footer by vertical position and short length
                    if (y0 <= header_y or y1 >= footer_y) and len(block_text) <= 100:
                        continue

                    t = block_text.replace("\r", "\n")
                    # join words split by hyphen at line end
                    t = re.sub(r'(\w)-\n(\w)', r'\1\2', t)
                    t = re.sub(r'\n+', '\n', t)
                    t = re.sub(r'[ \t]+', ' ', t)
                    t = t.strip()
                    if t:
                        paragraphs.append(t)

                page_text = "\n\n".join(paragraphs).strip()
                pages.append((i + 1, page_text))

                if len(page_text) > len(longest_text):
                    longest_text = page_text
        finally:
            doc.close()

        if not pages:
            raise DocumentParseError("PDF has no pages")

        metadata = {"language": ut.detect_language(longest_text)}
        return pages, metadata
