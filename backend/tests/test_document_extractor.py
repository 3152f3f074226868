"""
DocumentExtractor测试（使用reportlab生成的PDF）
"""
from io import BytesIO

import pytest
from reportlab.pdfgen import canvas

from app.schemas.learning import SummaryLevel
from app.services.document_extractor import DocumentExtractor
from app.services.result_exporter import ResultExporter
from app.utils.processing_exception import ErrorType, ExtractionError, InputError


def _text_pdf(text: str) -> bytes:
    return ResultExporter.export_summary_pdf(text, [], SummaryLevel.STUDENT).getvalue()


def _blank_pdf() -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


async def test_extract_pdf_bytes():
    data = _text_pdf("Caching improves latency for read heavy workloads.")
    progress = []

    text = await DocumentExtractor.extract_pdf_bytes(data, progress_callback=lambda current, total: progress.append((current, total)))

    assert "Caching improves latency for read heavy workloads." in text
    assert "PDF Summary (Student Level)" in text
    assert "\n" not in text
    assert progress == [(1, 1)]


async def test_extract_pdf_bytes_invalid_data():
    with pytest.raises(ExtractionError) as exc_info:
        await DocumentExtractor.extract_pdf_bytes(b"%PDF-1.4 this is not really a pdf")
    assert exc_info.value.error_type == ErrorType.EXTRACTION_FAILED


async def test_extract_pdf_bytes_without_text():
    """没有可提取文本时抛出InputError"""
    with pytest.raises(InputError) as exc_info:
        await DocumentExtractor.extract_pdf_bytes(_blank_pdf())
    assert exc_info.value.error_type == ErrorType.CONTENT_TOO_SHORT
