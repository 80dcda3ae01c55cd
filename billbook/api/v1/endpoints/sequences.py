from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from billbook.api.deps import DB
from billbook.core.enum_utils import to_enum, VALID_DOCUMENT_CLASSES
from billbook.models.document_sequence import DocumentClass
from billbook.schemas.company import SequencePreviewResponse
from billbook.services.company_service import CompanyService
from billbook.services.document_sequence_service import DocumentSequenceService, validate_prefix


router = APIRouter()


@router.get("/{document_class}/next", response_model=SequencePreviewResponse)
async def preview_next_number(
    document_class: str,
    db: DB,
    prefix: Optional[str] = Query(None, description="Defaults to the company profile prefix"),
):
    """Next number the document class would receive. Nothing is allocated."""
    doc_class = to_enum(document_class, DocumentClass)
    if doc_class is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown document class. Valid classes: {', '.join(sorted(VALID_DOCUMENT_CLASSES))}",
        )

    if prefix is None:
        prefixes = await CompanyService(db).sequence_prefixes()
        prefix = prefixes.for_class(doc_class)
    prefix = validate_prefix(prefix)

    next_number = await DocumentSequenceService(db).preview_next_number(doc_class, prefix)
    return SequencePreviewResponse(
        document_class=doc_class.value,
        prefix=prefix,
        next_number=next_number,
    )
