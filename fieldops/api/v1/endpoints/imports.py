# fieldops/api/v1/endpoints/imports.py
"""
CSV import endpoints.

Backend for the import wizard: upload and parse a file, adjust the column
mapping, preview validation, check for duplicates and run the import. The
wizard state lives with the caller; every request carries what it needs.
"""
import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response

from fieldops.api.v1.dependencies import get_notifier, get_record_store, get_tenant_id
from fieldops.core.config import settings
from fieldops.core.exceptions import ImportFileError, ValidationError
from fieldops.schemas.imports import (
    DuplicateSet, EntityType, ImportExecuteRequest, ImportSummaryResponse,
    MappingResponse, MappingUpdateRequest, ParseRequest, ParseResponse,
    PreviewResponse, RawTable, RowsRequest,
)
from fieldops.services.event_bus.bus import get_event_bus
from fieldops.services.event_bus.events import EventType
from fieldops.services.imports.duplicates import DuplicateDetector
from fieldops.services.imports.entities import get_entity
from fieldops.services.imports.events import ImportEventType, final_status_for
from fieldops.services.imports.executor import ImportExecutor
from fieldops.services.imports.mapping import SKIP, ColumnMapping
from fieldops.services.imports.wizard import ImportWizard

router = APIRouter()
logger = logging.getLogger("fieldops.api.imports")

ALLOWED_EXTENSIONS = {".csv", ".txt"}


def _to_column_mapping(entity_type: EntityType, mapping: Dict[str, str]) -> ColumnMapping:
    """Validate a client-supplied mapping."""
    known = {definition.field for definition in get_entity(entity_type).fields}
    unknown = sorted({field for field in mapping.values() if field not in known})
    if unknown:
        raise ValidationError(
            message=f"Unknown fields for {entity_type.value}: {', '.join(unknown)}",
            details={"unknown_fields": unknown},
        )
    try:
        return ColumnMapping(mapping)
    except ValueError as e:
        raise ValidationError(message=str(e), code="MAPPING_CONFLICT")


def _wizard_for(request: RowsRequest) -> ImportWizard:
    headers = list(request.headers)
    if not headers:
        for row in request.rows:
            headers.extend(header for header in row if header not in headers)

    wizard = ImportWizard(
        entity_type=request.entity_type,
        table=RawTable(headers=headers, rows=request.rows),
        mapping=_to_column_mapping(request.entity_type, request.mapping),
        step="mapping",
    )
    if request.apply_defaults:
        wizard = wizard.with_defaults()
    return wizard


def _parse_response(wizard: ImportWizard) -> ParseResponse:
    if wizard.table.is_empty:
        if wizard.table.warnings:
            message = wizard.table.warnings[0]
        else:
            message = "CSV file has a header row but no data rows"
        raise ImportFileError(
            message=message,
            code="EMPTY_IMPORT_FILE",
            details={"headers": wizard.table.headers, "warnings": wizard.table.warnings},
        )

    return ParseResponse(
        entity_type=wizard.entity_type,
        table=wizard.table,
        mapping=wizard.mapping.to_dict(),
        missing_required=wizard.missing_required,
        unmapped_headers=wizard.unmapped_headers,
    )


@router.get("/fields/{entity_type}")
async def get_fields(entity_type: EntityType) -> Dict[str, Any]:
    """
    Canonical fields for an entity type, with their aliases and which are required.
    """
    entity = get_entity(entity_type)
    return {
        "entity_type": entity_type,
        "fields": [
            {
                "field": definition.field,
                "label": definition.label,
                "aliases": definition.aliases,
                "required": definition.required,
            }
            for definition in entity.fields
        ],
        "required_fields": entity.required_fields,
        "defaults": entity.defaults,
    }


@router.get("/templates/{entity_type}")
async def download_template(entity_type: EntityType) -> Response:
    """Downloadable CSV template: header row plus one sample row."""
    entity = get_entity(entity_type)
    return Response(
        content=entity.template_csv(),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{entity_type.value}_import_template.csv"'
        },
    )


@router.post("/parse", response_model=ParseResponse)
async def parse_csv(
    request: ParseRequest,
    tenant_id: str = Depends(get_tenant_id),
) -> ParseResponse:
    """
    Parse CSV text and auto-detect the column mapping.

    Raises:
        ImportFileError: If the file has no data rows
    """
    wizard = ImportWizard.start(request.entity_type).load(request.content)
    logger.info(
        f"Tenant {tenant_id} parsed {len(wizard.table.rows)} {request.entity_type.value} rows"
    )
    return _parse_response(wizard)


@router.post("/upload", response_model=ParseResponse)
async def upload_csv(
    file: UploadFile = File(..., description="CSV file to import"),
    entity_type: EntityType = Form(...),
    tenant_id: str = Depends(get_tenant_id),
) -> ParseResponse:
    """
    Upload a CSV file, parse it and auto-detect the column mapping.

    Raises:
        ImportFileError: Wrong extension, too large, not UTF-8 or no data rows
    """
    if not file or not file.filename:
        raise ImportFileError("No file provided")

    extension = Path(file.filename).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ImportFileError(
            message="Please upload a CSV file",
            code="UNSUPPORTED_FILE_TYPE",
            details={"filename": file.filename, "allowed": sorted(ALLOWED_EXTENSIONS)},
        )

    content = await file.read(settings.IMPORT_MAX_FILE_SIZE + 1)
    if len(content) > settings.IMPORT_MAX_FILE_SIZE:
        raise ImportFileError(
            message=f"File size must be less than {settings.IMPORT_MAX_FILE_SIZE // (1024 * 1024)}MB",
            code="FILE_TOO_LARGE",
            details={"max_bytes": settings.IMPORT_MAX_FILE_SIZE},
        )

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportFileError(
            message="File must be UTF-8 encoded",
            code="INVALID_ENCODING",
            details={"filename": file.filename},
        )

    wizard = ImportWizard.start(entity_type).load(text)
    logger.info(
        f"Tenant {tenant_id} uploaded {file.filename}: {len(wizard.table.rows)} {entity_type.value} rows"
    )
    return _parse_response(wizard)


@router.post("/mapping", response_model=MappingResponse)
async def update_mapping(
    request: MappingUpdateRequest,
    tenant_id: str = Depends(get_tenant_id),
) -> MappingResponse:
    """
    Assign a column to a field, or skip it.

    A field already held by another column moves to this one; the other
    column becomes unmapped.
    """
    if request.header not in request.headers:
        raise ValidationError(
            message=f"Unknown column: {request.header}",
            details={"header": request.header},
        )
    if request.field != SKIP:
        _to_column_mapping(request.entity_type, {request.header: request.field})

    wizard = ImportWizard(
        entity_type=request.entity_type,
        table=RawTable(headers=request.headers, rows=[]),
        mapping=_to_column_mapping(request.entity_type, request.mapping),
        step="mapping",
    ).remap(request.header, request.field)

    return MappingResponse(
        mapping=wizard.mapping.to_dict(),
        missing_required=wizard.missing_required,
        unmapped_headers=wizard.unmapped_headers,
    )


@router.post("/preview", response_model=PreviewResponse)
async def preview_import(
    request: RowsRequest,
    tenant_id: str = Depends(get_tenant_id),
) -> PreviewResponse:
    """
    Validate every row against the mapping and show the first rows normalized.

    Raises:
        MappingIncompleteError: If a required field has no column
    """
    wizard = _wizard_for(request).confirm_mapping()
    return PreviewResponse(
        entity_type=request.entity_type,
        total_rows=len(wizard.table.rows),
        valid_count=wizard.valid_count,
        invalid_count=wizard.invalid_count,
        rows=wizard.preview(),
        outcomes=list(wizard.outcomes),
        mapping=wizard.mapping.to_dict(),
    )


@router.post("/duplicates", response_model=DuplicateSet)
async def check_duplicates(
    request: RowsRequest,
    store = Depends(get_record_store),
) -> DuplicateSet:
    """Flag rows that probably already exist. Advisory only."""
    wizard = _wizard_for(request)
    detector = DuplicateDetector(store)
    return await detector.detect(request.entity_type, wizard.table.rows, wizard.mapping)


@router.post("/execute", response_model=ImportSummaryResponse, status_code=status.HTTP_200_OK)
async def execute_import(
    request: ImportExecuteRequest,
    store = Depends(get_record_store),
    notifier = Depends(get_notifier),
) -> ImportSummaryResponse:
    """
    Import the rows. Rows are committed one at a time; failures are reported
    per row and never abort the run.

    Raises:
        MappingIncompleteError: If a required field has no column
    """
    event_bus = get_event_bus()

    async def publish_progress(event) -> None:
        event_type = (
            EventType.IMPORT_COMPLETED
            if event["type"] == ImportEventType.COMPLETED
            else EventType.IMPORT_PROGRESS
        )
        await event_bus.publish(event_type, {**event, "tenant_id": store.tenant_id})

    wizard = _wizard_for(request).confirm_mapping()
    executor = ImportExecutor(store, notifier=notifier, progress_callback=publish_progress)
    _, result = await wizard.run(executor, duplicate_count=request.duplicate_count)

    return ImportSummaryResponse(
        entity_type=request.entity_type,
        result=result,
        total_rows=result.total_rows,
        success_rate=result.success_rate,
        final_status=final_status_for(result.success_count, result.failed_count),
    )
