"""Loan documents and contract rendering"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from rahnu_gateway.config import settings
from rahnu_gateway.domain.contracts import generate_contract
from rahnu_gateway.domain.lifecycle import ensure_document_transition
from rahnu_gateway.domain.models import Document, DocumentStatus, Loan
from rahnu_gateway.services.common import Service, parse_enum

logger = logging.getLogger(__name__)

CONTRACT_DOCUMENT_TYPE = "contract"


class DocumentService(Service):
    def list_documents(self) -> List[Document]:
        return self.storage.documents.list()

    def list_documents_by_loan(self, loan_id: int) -> List[Document]:
        self.storage.loans.get(loan_id)
        return self.storage.documents.list(loan_id=loan_id)

    def create_document(self, fields: Dict[str, Any]) -> Document:
        fields = dict(fields)
        fields["status"] = parse_enum(DocumentStatus, fields.get("status", DocumentStatus.PENDING), "status")
        with self.storage.transaction():
            self.storage.loans.get(fields.get("loan_id"))
            return self.storage.documents.create(fields)

    def update_document_status(self, document_id: int, status: Any) -> Document:
        target = parse_enum(DocumentStatus, status, "status")
        with self.storage.transaction():
            document = self.storage.documents.get(document_id)
            ensure_document_transition(document.status, target)
            return self.storage.documents.update(document_id, {"status": target})

    def generate_contract_document(self, loan_id: int, template_type: str) -> Document:
        """Issue an approved contract document for a loan"""
        now = self.now()
        with self.storage.transaction():
            loan = self.storage.loans.get(loan_id)
            self.storage.clients.get(loan.client_id)
            document = self.storage.documents.create(
                {
                    "loan_id": loan.id,
                    "name": f"{template_type}_Contract_{loan.contract_number}",
                    "type": CONTRACT_DOCUMENT_TYPE,
                    "status": DocumentStatus.APPROVED,
                    "document_number": f"DOC-{int(now.timestamp() * 1000)}",
                    "issuing_authority": settings.issuing_authority,
                }
            )

        logger.info(
            "Contract document generated",
            extra={"document_id": document.id, "loan_id": loan.id, "template_type": template_type},
        )
        return document

    def _template_for(self, document: Document, loan: Loan) -> str:
        if document.type != CONTRACT_DOCUMENT_TYPE:
            return document.type
        # Generated contracts are named <template>_Contract_<number>
        prefix = document.name.split("_Contract_", 1)[0]
        return prefix if prefix != document.name else loan.shariah_contract_type

    def render_document(self, document_id: int) -> Tuple[str, str]:
        """Filename and HTML body for downloading a document"""
        document = self.storage.documents.get(document_id)
        loan = self.storage.loans.get(document.loan_id)
        client = self.storage.clients.get(loan.client_id)
        html = generate_contract(self._template_for(document, loan), loan, client, self.today())
        return f"{document.name}.html", html

    def render_template(self, template_type: str, loan_id: Optional[int] = None) -> Tuple[str, str]:
        """Blank template, prefilled from a loan when one is given"""
        loan = client = None
        if loan_id is not None:
            loan = self.storage.loans.get(loan_id)
            client = self.storage.clients.get(loan.client_id)
        html = generate_contract(template_type, loan, client, self.today())
        return f"{template_type}_contract.html", html
