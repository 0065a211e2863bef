import pytest

from model.models import DocumentAnalysis


# Mock API Keys globally for tests to avoid ModelLoader crashes
@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "TEST_KEY")
    monkeypatch.setenv("GROQ_API_KEY", "TEST_KEY")
    monkeypatch.setenv("GEMINI_API_KEY", "TEST_KEY")


class FakePdfBackend:
    """In-memory PDF engine: each page is (embedded_text, bitmap_label)."""

    def __init__(self, pages=None, open_error=None, page_error_at=None):
        self.pages = pages or []
        self.open_error = open_error
        self.page_error_at = page_error_at
        self.rendered = []
        self.closed = False

    def open(self, content):
        if self.open_error is not None:
            raise self.open_error
        return self.pages

    def page_count(self, doc):
        return len(doc)

    def page_text(self, doc, index):
        if index == self.page_error_at:
            raise RuntimeError("broken page tree")
        return doc[index][0]

    def render_page(self, doc, index, scale):
        self.rendered.append(index)
        return doc[index][1]

    def close(self, doc):
        self.closed = True


class FakeOcr:
    """OCR adapter keyed by bitmap label; a label mapped to an exception raises it."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    def ocr(self, bitmap):
        self.calls.append(bitmap)
        result = self.results.get(bitmap, "")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_pdf_backend():
    return FakePdfBackend


@pytest.fixture
def fake_ocr():
    return FakeOcr


@pytest.fixture
def sample_analysis():
    return DocumentAnalysis.model_validate({
        "summary": "Master services agreement between Acme Corp and Beta LLC.",
        "documentType": "Service Agreement",
        "keyPoints": ["12 month term", "Net 60 payment"],
        "risks": [
            {"level": "High", "description": "Unlimited liability for the vendor", "recommendation": "Cap it"},
            {"level": "Medium", "description": "Late payment fee of 5% per month", "recommendation": "Lower it"},
            {"level": "Low", "description": "Notices by email only", "recommendation": "Add courier"},
        ],
        "obligations": [
            {"party": "Beta LLC", "description": "Deliver the first milestone", "deadline": "2025-03-01"},
            {"party": "Acme Corp", "description": "Provide access to systems", "deadline": ""},
        ],
        "importantClauses": [
            {"title": "Confidentiality", "content": "Both parties keep information secret.", "importance": "High"},
            {"title": "Governing Law", "content": "Texas law applies.", "importance": "Medium"},
        ],
        "deadlines": [
            {"description": "Renewal notice", "date": "TBD", "consequence": "Auto renewal"},
            {"description": "Contract start", "date": "2025-01-01", "consequence": "Work begins"},
        ],
    })
