"""Tests for content extraction."""

import base64
from unittest.mock import MagicMock

import pytest

from storage import (
    StorageDriver, AuthRequiredError, RemoteFile,
    GOOGLE_DOC_MIME_TYPE, GOOGLE_SHEET_MIME_TYPE, PDF_MIME_TYPE,
)
from workflows import extract, extract_all, pdf_to_text
from workflows.extractor import MAX_IMAGE_BYTES


def make_pdf(text: str) -> bytes:
    """Build a one-page PDF showing `text` in Helvetica."""
    stream = b"BT /F1 12 Tf 72 720 Td (" + text.encode('latin-1') + b") Tj ET"
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R"
        b" /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1, xref_offset)
    return out


class TestExtract:

    def test_google_doc_exported(self, driver):
        driver.add_file('d1', 'Plan', mime_type=GOOGLE_DOC_MIME_TYPE, content="Our plan")
        doc = extract(driver, driver.get_item('d1'))
        assert doc.content == "Our plan"
        assert doc.is_binary is False

    def test_export_formats(self):
        mock_driver = MagicMock(spec=StorageDriver)
        mock_driver.export_text.return_value = "a,b\n1,2"
        sheet = RemoteFile(id='s1', name='Numbers', mime_type=GOOGLE_SHEET_MIME_TYPE)

        doc = extract(mock_driver, sheet)

        mock_driver.export_text.assert_called_once_with('s1', 'text/csv')
        assert doc.content == "a,b\n1,2"

    def test_pdf_text(self, driver):
        driver.add_file('p1', 'plan.pdf', mime_type=PDF_MIME_TYPE, content=make_pdf("Hello investors"))
        doc = extract(driver, driver.get_item('p1'))
        assert "Hello investors" in doc.content

    def test_unreadable_pdf_skipped(self, driver, quiet_log):
        driver.add_file('p1', 'broken.pdf', mime_type=PDF_MIME_TYPE, content=b"not a pdf")
        assert extract(driver, driver.get_item('p1')) is None
        assert any("broken.pdf" in line for line in quiet_log)

    def test_pdf_without_text_layer_logged(self, driver, quiet_log):
        driver.add_file('p1', 'scan.pdf', mime_type=PDF_MIME_TYPE, content=make_pdf(""))
        assert extract(driver, driver.get_item('p1')) is None
        assert any("scan.pdf" in line and "no text" in line for line in quiet_log)

    def test_text_file_decoded(self, driver):
        driver.add_file('t1', 'notes.txt', content="Café ideas")
        assert extract(driver, driver.get_item('t1')).content == "Café ideas"

    def test_empty_content_skipped(self, driver):
        driver.add_file('t1', 'empty.txt', content="   \n")
        assert extract(driver, driver.get_item('t1')) is None

    def test_unsupported_type_not_downloaded(self, driver):
        driver.add_file('z1', 'archive.zip', mime_type='application/zip', content=b"PK")
        assert extract(driver, driver.get_item('z1')) is None
        assert driver.download_calls == []

    def test_images_only_when_requested(self, driver):
        driver.add_file('i1', 'logo.png', mime_type='image/png', content=b"\x89PNG")
        item = driver.get_item('i1')

        assert extract(driver, item) is None

        doc = extract(driver, item, include_images=True)
        assert doc.is_binary is True
        assert base64.b64decode(doc.content) == b"\x89PNG"

    def test_large_image_skipped(self, driver):
        driver.add_file('i1', 'huge.png', mime_type='image/png', content=b"x",
                        size=MAX_IMAGE_BYTES + 1)
        assert extract(driver, driver.get_item('i1'), include_images=True) is None
        assert driver.download_calls == []

    def test_storage_failure_skipped(self, driver):
        driver.add_file('t1', 'notes.txt', content="x")
        driver.failing.add('t1')
        assert extract(driver, driver.get_item('t1')) is None

    def test_auth_failure_propagates(self, driver):
        driver.add_file('t1', 'notes.txt', content="x")
        driver.auth_failing.add('t1')
        item = driver.items['t1']
        with pytest.raises(AuthRequiredError):
            extract(driver, item)

    def test_truncation_length_set(self, driver):
        driver.add_file('t1', 'notes.txt', content="x" * 50)
        doc = extract(driver, driver.get_item('t1'), max_chars=10)
        assert doc.truncation_length == 10
        assert len(doc.content) == 50


class TestExtractAll:

    def test_keeps_order_and_drops_failures(self, driver):
        driver.add_file('t1', 'one.txt', content="1")
        driver.add_file('t2', 'two.txt', content="2")
        driver.add_file('t3', 'three.txt', content="3")
        driver.failing.add('t2')
        files = [driver.get_item(i) for i in ('t3', 't2', 't1')]

        docs = extract_all(driver, files)

        assert [d.name for d in docs] == ['three.txt', 'one.txt']


class TestPdfToText:

    def test_extracts_page_text(self):
        assert "Page text" in pdf_to_text(make_pdf("Page text"))
