"""
Tests for invoice / receipt PDF generation
"""
import io

import pytest

from portal.services.document_service import included_tax, render_invoice, render_receipt


@pytest.fixture
def document_order():
    return {
        "id": 42,
        "user_name": "Gym Tokyo",
        "total_price": 30800,
        "items": [
            {"name": "BASE (Cocoa)", "price": 1500, "quantity": 20},
            {"name": "Shipping & handling", "price": 800, "quantity": 1},
        ],
    }


@pytest.mark.unit
class TestDocuments:
    def test_included_tax(self):
        assert included_tax(1080) == 80
        assert included_tax(30000) == 2222
        assert included_tax(0) == 0

    @pytest.mark.parametrize("render", [render_invoice, render_receipt])
    def test_renders_pdf(self, render, document_order):
        buffer = io.BytesIO()
        render(document_order, buffer)
        data = buffer.getvalue()
        assert data.startswith(b"%PDF")
        assert len(data) > 500
