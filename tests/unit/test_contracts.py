"""Unit tests for contract HTML rendering"""

from datetime import date
from decimal import Decimal

import pytest

from rahnu_gateway.domain.contracts import TEMPLATES, generate_contract
from rahnu_gateway.domain.models import Client, Loan, PaymentFrequency


@pytest.fixture
def contract_loan() -> Loan:
    return Loan(
        id=7,
        client_id=3,
        contract_number="GF-20250115-ABC123",
        total_gold_value=Decimal("5000.00"),
        financing_amount=Decimal("3500.00"),
        financing_ratio=Decimal("0.70"),
        profit_rate=Decimal("5"),
        term_months=12,
        payment_frequency=PaymentFrequency.MONTHLY,
        created_by=1,
        gold_item_ids=[4, 5],
    )


@pytest.fixture
def contract_client() -> Client:
    return Client(
        id=3,
        full_name="Siti <b>Aminah</b>",
        email="siti@example.com",
        phone="+60198765432",
        identification_number="900202-10-1234",
        identification_type="national_id",
    )


def test_murabaha_contract_contents(contract_loan, contract_client):
    html = generate_contract("murabaha", contract_loan, contract_client, date(2025, 1, 15))

    assert html.startswith("<!DOCTYPE html>")
    assert "Murabaha Gold Financing Contract" in html
    assert "Contract No: GF-20250115-ABC123" in html
    assert "Date: 15/01/2025" in html
    assert "RM 3500.00" in html
    assert "900202-10-1234" in html


def test_client_values_are_escaped(contract_loan, contract_client):
    html = generate_contract("murabaha", contract_loan, contract_client, date(2025, 1, 15))

    assert "Siti &lt;b&gt;Aminah&lt;/b&gt;" in html
    assert "<b>Aminah</b>" not in html


def test_missing_values_render_as_placeholders():
    html = generate_contract("murabaha", issued_on=date(2025, 1, 15))

    assert "[Contract Number]" in html
    assert "[Client Name]" in html
    assert "RM [Amount]" in html


def test_missing_client_address_uses_placeholder(contract_loan, contract_client):
    html = generate_contract("qard_hassan", contract_loan, contract_client, date(2025, 1, 15))

    assert "Address: [Client Address]" in html
    assert "Qard Hassan Benevolent Loan Contract" in html


@pytest.mark.parametrize(
    "template_type,title",
    [
        ("musharakah", "Musharakah Partnership Contract"),
        ("wadiah", "Wadiah Safekeeping Contract"),
        ("ijarah", "Ijarah Financing Agreement"),
        ("bai_inah", "Bai Inah Financing Agreement"),
    ],
)
def test_template_titles(template_type, title, contract_loan, contract_client):
    html = generate_contract(template_type, contract_loan, contract_client, date(2025, 1, 15))
    assert f"<title>{title}</title>" in html


def test_rendering_is_deterministic(contract_loan, contract_client):
    first = generate_contract("wadiah", contract_loan, contract_client, date(2025, 1, 15))
    second = generate_contract("wadiah", contract_loan, contract_client, date(2025, 1, 15))
    assert first == second


def test_explicit_contract_number_wins(contract_loan):
    html = generate_contract("murabaha", contract_loan, contract_number="MANUAL-1", issued_on=date(2025, 1, 15))
    assert "Contract No: MANUAL-1" in html


def test_known_templates():
    assert set(TEMPLATES) == {"murabaha", "qard_hassan", "musharakah", "wadiah"}
