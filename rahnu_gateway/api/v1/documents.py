"""Loan documents and Shariah contract rendering"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette.responses import Response

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import (
    DocumentCreate,
    DocumentGenerate,
    DocumentResponse,
    DocumentStatusUpdate,
)
from rahnu_gateway.services.container import Services

router = APIRouter()


def html_attachment(filename: str, html: str) -> Response:
    return Response(
        content=html,
        media_type="text/html",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/documents", response_model=List[DocumentResponse])
def list_documents(services: Services = Depends(get_services)):
    return services.documents.list_documents()


@router.get("/loans/{loan_id}/documents", response_model=List[DocumentResponse])
def list_loan_documents(loan_id: int, services: Services = Depends(get_services)):
    return services.documents.list_documents_by_loan(loan_id)


@router.post("/documents", response_model=DocumentResponse, status_code=201)
def create_document(body: DocumentCreate, services: Services = Depends(get_services)):
    return services.documents.create_document(body.model_dump())


@router.post("/documents/generate", response_model=DocumentResponse, status_code=201)
def generate_contract_document(body: DocumentGenerate, services: Services = Depends(get_services)):
    return services.documents.generate_contract_document(body.loan_id, body.template_type)


@router.patch("/documents/{document_id}/status", response_model=DocumentResponse)
def update_document_status(
    document_id: int,
    body: DocumentStatusUpdate,
    services: Services = Depends(get_services),
):
    return services.documents.update_document_status(document_id, body.status)


@router.get("/documents/{document_id}/download")
def download_document(document_id: int, services: Services = Depends(get_services)):
    filename, html = services.documents.render_document(document_id)
    return html_attachment(filename, html)


@router.get("/contracts/template/{template_type}")
def contract_template(
    template_type: str,
    loan_id: Optional[int] = None,
    services: Services = Depends(get_services),
):
    """Blank contract template, prefilled when loan_id is given"""
    filename, html = services.documents.render_template(template_type, loan_id)
    return html_attachment(filename, html)
