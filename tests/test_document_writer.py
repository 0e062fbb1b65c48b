"""Unit tests for PdfDocumentWriter and the size-limited sink."""

import io

import pytest
from pypdf import PdfReader

from conftest import noisy_image, stored_image
from services.assembly import ByteBudgetSink
from services.document_writer import PdfDocumentWriter
from utils.errors import DocumentSizeExceeded


class TestPdfDocumentWriter:
    def test_one_page_per_image_sized_by_dpi(self):
        writer = PdfDocumentWriter(page_dpi=150)
        images = [stored_image(300, 150), stored_image(150, 300), stored_image(600, 600)]
        sink = io.BytesIO()

        assert writer.write(images, sink) == 3

        reader = PdfReader(io.BytesIO(sink.getvalue()))
        assert len(reader.pages) == 3
        sizes = [(float(p.mediabox.width), float(p.mediabox.height)) for p in reader.pages]
        expected = [writer.page_size(image) for image in images]
        for (w, h), (ew, eh) in zip(sizes, expected):
            assert w == pytest.approx(ew, abs=0.01)
            assert h == pytest.approx(eh, abs=0.01)

    def test_stored_jpeg_is_embedded_unchanged(self):
        images = [noisy_image(200, 200), stored_image(90, 40)]
        sink = io.BytesIO()
        PdfDocumentWriter().write(images, sink)

        reader = PdfReader(io.BytesIO(sink.getvalue()))
        for page, image in zip(reader.pages, images):
            xobjects = page["/Resources"]["/XObject"]
            (stream,) = [xobjects[name].get_object() for name in xobjects]
            assert stream["/Filter"] == "/DCTDecode"
            assert stream.get_data() == image.content

    def test_page_size_uses_fixed_ratio(self):
        writer = PdfDocumentWriter(page_dpi=72)
        assert writer.page_size(stored_image(100, 50)) == (100.0, 50.0)
        assert PdfDocumentWriter(page_dpi=144).page_size(stored_image(100, 50)) == (50.0, 25.0)

    def test_empty_input_rejected(self):
        with pytest.raises(ValueError):
            PdfDocumentWriter().write([], io.BytesIO())

    def test_invalid_dpi_rejected(self):
        with pytest.raises(ValueError):
            PdfDocumentWriter(page_dpi=0)


class TestByteBudgetSink:
    def test_accumulates_within_limit(self):
        sink = ByteBudgetSink(10)
        sink.write(b"abcd")
        sink.write(b"efghij")
        assert sink.written == 10
        assert sink.getvalue() == b"abcdefghij"
        assert sink.tell() == 10

    def test_chunk_crossing_limit_is_refused(self):
        sink = ByteBudgetSink(10)
        sink.write(b"abcdefgh")
        with pytest.raises(DocumentSizeExceeded) as info:
            sink.write(b"xyz")
        assert info.value.written == 11
        assert info.value.limit == 10
        assert sink.getvalue() == b"abcdefgh"

    def test_writer_stops_at_first_oversized_chunk(self):
        sink = ByteBudgetSink(20_000)
        with pytest.raises(DocumentSizeExceeded):
            PdfDocumentWriter().write([noisy_image(400, 400) for _ in range(3)], sink)
        assert sink.written <= 20_000
