import os

os.environ["ANALYZER_USE_LLM"] = "false"

import pytest

from docgraph.fileparser import DocumentParseError, FileParser

fitz = pytest.importorskip("fitz")


def _pdf(texts):
    doc = fitz.open()
    for text in texts:
        page = doc.new_page()
        page.insert_text((72, 40), "ACME Confidential", fontsize=8)  # header band
        page.insert_text((72, 300), text, fontsize=12)
        page.insert_text((300, 820), "3", fontsize=8)  # page number
    data = doc.tobytes()
    doc.close()
    return data


def test_pdf_pages_drop_headers_and_page_numbers():
    pages, meta = FileParser().parse_bytes(_pdf(["Supply chain planning with AI", "Roadmap"]), "deck.pdf")
    assert [n for n, _ in pages] == [1, 2]
    assert "Supply chain planning with AI" in pages[0][1]
    assert "ACME Confidential" not in pages[0][1]
    assert meta["extension"] == ".pdf"
    assert "language" in meta


def test_text_upload_is_single_page():
    pages, meta = FileParser().parse_bytes("첫 줄\n둘째 줄".encode("utf-8"), "notes.md")
    assert pages == [(1, "첫 줄\n둘째 줄")]
    assert meta["file_size"] > 0


@pytest.mark.parametrize("data, name", [
    (b"abc", "image.png"),
    (b"", "empty.pdf"),
    (b"not a pdf", "broken.pdf"),
])
def test_unreadable_uploads_raise(data, name):
    with pytest.raises(DocumentParseError):
        FileParser().parse_bytes(data, name)
