"""Shariah contract templates rendered as standalone HTML documents"""

from datetime import date
from html import escape
from typing import Callable, Dict, List, Optional, Tuple

from rahnu_gateway.domain.models import Client, Loan

FINANCIER = "AR-Rahnu Sdn Bhd"

STYLE = """
        body { font-family: Arial, sans-serif; margin: 40px; line-height: 1.6; }
        .header { text-align: center; border-bottom: 2px solid #2c5530; padding-bottom: 20px; margin-bottom: 30px; }
        .section { margin: 20px 0; }
        .section-title { font-weight: bold; color: #2c5530; border-bottom: 1px solid #ccc; padding-bottom: 5px; }
        .party-box { border: 1px solid #ddd; padding: 15px; margin: 10px 0; }
        .signature-box { display: inline-block; width: 300px; margin: 20px 50px 20px 0; }
        .signature-line { border-bottom: 1px solid #000; height: 30px; margin-bottom: 5px; }
        .footer { margin-top: 50px; text-align: center; font-size: 12px; color: #666; }
"""


def _value(obj: Optional[object], attr: str, placeholder: str) -> str:
    value = getattr(obj, attr, None) if obj is not None else None
    if value is None or value == "":
        return f"[{placeholder}]"
    return escape(str(value))


def _list(items: List[str], ordered: bool = False) -> str:
    tag = "ol" if ordered else "ul"
    body = "\n".join(f"            <li>{escape(item)}</li>" for item in items)
    return f"<{tag}>\n{body}\n        </{tag}>"


def _financing_details(loan: Optional[Loan]) -> str:
    return f"""
        <p><strong>Financing Amount:</strong> RM {_value(loan, "financing_amount", "Amount")}</p>
        <p><strong>Gold Items Value:</strong> RM {_value(loan, "total_gold_value", "Gold Value")}</p>
        <p><strong>Financing Ratio:</strong> {_value(loan, "financing_ratio", "Ratio")}</p>
        <p><strong>Profit Rate:</strong> {_value(loan, "profit_rate", "Rate")}% per annum</p>
        <p><strong>Financing Period:</strong> {_value(loan, "term_months", "Term")} months</p>"""


def _render(
    title: str,
    loan: Optional[Loan],
    client: Optional[Client],
    contract_number: str,
    issued_on: str,
    sections: List[Tuple[str, str]],
) -> str:
    body = "\n".join(
        f"""    <div class="section">
        <div class="section-title">{escape(heading)}</div>
        {content}
    </div>"""
        for heading, content in sections
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{escape(title)}</title>
    <style>{STYLE}    </style>
</head>
<body>
    <div class="header">
        <div><strong>AR-Rahnu</strong></div>
        <div>Islamic Gold Financing Solutions</div>
        <div>{escape(title.upper())}</div>
        <div>Contract No: {escape(contract_number)}</div>
        <div>Date: {escape(issued_on)}</div>
    </div>

    <div class="section">
        <div class="section-title">PARTIES TO THE CONTRACT</div>
        <div class="party-box">
            <strong>THE FINANCIER:</strong><br>
            {FINANCIER}<br>
            Address: Kuala Lumpur, Malaysia
        </div>
        <div class="party-box">
            <strong>THE CUSTOMER:</strong><br>
            Name: {_value(client, "full_name", "Client Name")}<br>
            IC/Passport: {_value(client, "identification_number", "ID Number")}<br>
            Address: {_value(client, "address", "Client Address")}<br>
            Phone: {_value(client, "phone", "Phone Number")}<br>
            Email: {_value(client, "email", "Email")}
        </div>
    </div>

{body}

    <div class="section">
        <div class="signature-box">
            <div class="signature-line"></div>
            <div><strong>Customer Signature</strong></div>
            <div>Name: {_value(client, "full_name", "Client Name")}</div>
        </div>
        <div class="signature-box">
            <div class="signature-line"></div>
            <div><strong>AR-Rahnu Representative</strong></div>
        </div>
    </div>

    <div class="footer">
        <p>{FINANCIER} | Licensed Islamic Financial Institution | Regulated by Bank Negara Malaysia</p>
    </div>
</body>
</html>
"""


def _murabaha(loan, client, contract_number, issued_on):
    return _render(
        "Murabaha Gold Financing Contract",
        loan,
        client,
        contract_number,
        issued_on,
        [
            ("FINANCING DETAILS", _financing_details(loan)),
            (
                "SHARIAH COMPLIANCE",
                _list(
                    [
                        "The financier purchases the gold items at market value",
                        "The financier sells the gold back to the customer on a cost-plus-profit basis",
                        "The profit margin is predetermined and disclosed upfront",
                        "No interest (riba) is charged, only legitimate trade profit",
                    ]
                ),
            ),
            (
                "TERMS AND CONDITIONS",
                _list(
                    [
                        "The customer pledges the gold items as security for this financing",
                        "Installments are due on the same date of each period",
                        "Early settlement is permitted with rebate (Ibra) consideration",
                        "Late payment incurs Ta'widh (compensation) as per Shariah guidelines",
                        "Gold items remain in the financier's custody until full settlement",
                    ],
                    ordered=True,
                ),
            ),
        ],
    )


def _qard_hassan(loan, client, contract_number, issued_on):
    return _render(
        "Qard Hassan Benevolent Loan Contract",
        loan,
        client,
        contract_number,
        issued_on,
        [
            (
                "LOAN DETAILS",
                f"""
        <p><strong>Loan Amount:</strong> RM {_value(loan, "financing_amount", "Amount")}</p>
        <p><strong>Collateral Value:</strong> RM {_value(loan, "total_gold_value", "Gold Value")}</p>
        <p><strong>Repayment Period:</strong> {_value(loan, "term_months", "Term")} months</p>
        <p><strong>Profit:</strong> None (benevolent loan)</p>""",
            ),
            (
                "SHARIAH COMPLIANCE",
                _list(
                    [
                        "The customer repays only the principal amount",
                        "No profit or benefit is stipulated by the lender",
                        "A voluntary gift (hibah) on repayment is permitted but not required",
                    ]
                ),
            ),
        ],
    )


def _musharakah(loan, client, contract_number, issued_on):
    return _render(
        "Musharakah Partnership Contract",
        loan,
        client,
        contract_number,
        issued_on,
        [
            ("CAPITAL CONTRIBUTION", _financing_details(loan)),
            (
                "PARTNERSHIP TERMS",
                _list(
                    [
                        "Profits are shared according to the agreed ratio",
                        "Losses are borne in proportion to capital contribution",
                        "The customer may buy out the financier's share progressively",
                    ],
                    ordered=True,
                ),
            ),
        ],
    )


def _wadiah(loan, client, contract_number, issued_on):
    return _render(
        "Wadiah Safekeeping Contract",
        loan,
        client,
        contract_number,
        issued_on,
        [
            (
                "SAFEKEEPING DETAILS",
                f"""
        <p><strong>Deposited Gold Value:</strong> RM {_value(loan, "total_gold_value", "Gold Value")}</p>
        <p><strong>Gold Items:</strong> {_value(loan, "gold_item_ids", "Items")}</p>""",
            ),
            (
                "CUSTODIAN OBLIGATIONS",
                _list(
                    [
                        "The custodian holds the gold items in trust (amanah)",
                        "The items are returned to the depositor on demand",
                        "The custodian is liable only for negligence or misconduct",
                    ],
                    ordered=True,
                ),
            ),
        ],
    )


TEMPLATES: Dict[str, Callable[..., str]] = {
    "murabaha": _murabaha,
    "qard_hassan": _qard_hassan,
    "musharakah": _musharakah,
    "wadiah": _wadiah,
}


def generate_contract(
    template_type: str,
    loan: Optional[Loan] = None,
    client: Optional[Client] = None,
    issued_on: Optional[date] = None,
    contract_number: Optional[str] = None,
) -> str:
    """
    Render a contract as HTML from a loan and client snapshot.

    Pure function: the output depends only on the arguments. Unknown template
    types render a generic financing agreement. Missing loan or client values
    appear as bracketed placeholders.
    """
    issued = (issued_on or date.today()).strftime("%d/%m/%Y")
    number = contract_number or (loan.contract_number if loan is not None else "[Contract Number]")

    renderer = TEMPLATES.get(template_type)
    if renderer is not None:
        return renderer(loan, client, number, issued)

    title = f"{template_type.replace('_', ' ').title()} Financing Agreement"
    return _render(title, loan, client, number, issued, [("FINANCING DETAILS", _financing_details(loan))])
