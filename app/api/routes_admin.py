"""
Admin API routes - requires authentication
"""

from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.schemas.guest import GuestCreate, GuestUpdate
from app.services.excel_service import ExcelService
from app.services.guest_admin_service import GuestAdminService
from app.services.repositories import get_guest_directory
from app.utils.security import verify_admin_token
from app.utils.responses import success_response, error_response

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

router = APIRouter(dependencies=[Depends(verify_admin_token)])

def get_admin_service(db: Session = Depends(get_db)) -> GuestAdminService:
    return GuestAdminService(get_guest_directory(db))

def dump(guest) -> dict:
    return guest.model_dump(mode="json", by_alias=True)

@router.get("/guests")
async def list_guests(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    vip: Optional[bool] = Query(None),
    service: GuestAdminService = Depends(get_admin_service)
):
    """Search and filter the guest list"""
    guests = service.list_guests(search=search, status=status, vip=vip)

    return success_response(
        message="Guests retrieved successfully",
        data={"guests": [dump(g) for g in guests], "total": len(guests)}
    )

@router.get("/guests/stats")
async def guest_statistics(service: GuestAdminService = Depends(get_admin_service)):
    """Counts by status, VIPs and total headcount"""
    return success_response(
        message="Guest statistics retrieved",
        data=service.statistics()
    )

@router.get("/guests/export.xlsx")
async def export_guests(service: GuestAdminService = Depends(get_admin_service)):
    """Export the current guest list to Excel"""
    excel_content = ExcelService.export_guests(service.list_guests())

    return Response(
        content=excel_content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=guest_list.xlsx"}
    )

@router.get("/template.xlsx")
async def download_template():
    """Download the Excel template for bulk import"""
    return Response(
        content=ExcelService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=guest_list_template.xlsx"}
    )

@router.post("/guests/import")
async def import_guests(
    file: UploadFile = File(...),
    service: GuestAdminService = Depends(get_admin_service)
):
    """Bulk import guests from an Excel file"""
    if not file.filename.endswith(('.xlsx', '.xls')):
        return error_response(
            message="Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            status_code=400
        )

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        return error_response(message="File is too large", status_code=413)

    success, errors, rows = ExcelService.parse_guest_rows(file_content)
    if not success:
        return error_response(
            message="Excel file validation failed",
            details=errors,
            status_code=422
        )

    results = service.bulk_import(rows)

    return success_response(
        message=f"Bulk import completed. Success: {results.success}, Failed: {results.failed}",
        data=results.model_dump()
    )

@router.post("/guests", status_code=201)
async def create_guest(
    guest_data: GuestCreate,
    allow_duplicate: bool = Query(False),
    service: GuestAdminService = Depends(get_admin_service)
):
    """Add a guest to the list"""
    guest = service.create(guest_data, allow_duplicate=allow_duplicate)

    return success_response(
        message="Guest created successfully",
        data=dump(guest),
        status_code=201
    )

@router.patch("/guests/{key}")
async def update_guest(
    key: str,
    guest_update: GuestUpdate,
    service: GuestAdminService = Depends(get_admin_service)
):
    """Update a guest by id or name; only the fields sent are changed"""
    guest = service.update(key, guest_update)

    return success_response(
        message="Guest updated successfully",
        data=dump(guest)
    )

@router.delete("/guests/{key}")
async def delete_guest(
    key: str,
    service: GuestAdminService = Depends(get_admin_service)
):
    """Remove a guest by id or name"""
    guest = service.delete(key)

    return success_response(
        message="Guest deleted successfully",
        data={"id": guest.id}
    )

@router.post("/guests/{key}/approve")
async def approve_request(
    key: str,
    service: GuestAdminService = Depends(get_admin_service)
):
    """Admit a join request to the guest list"""
    guest = service.approve_request(key)

    return success_response(
        message="Request approved",
        data=dump(guest)
    )

@router.get("/messages")
async def guest_messages(
    search: Optional[str] = Query(None),
    service: GuestAdminService = Depends(get_admin_service)
):
    """Messages guests left with their RSVP"""
    guests = service.messages(search=search)

    return success_response(
        message="Messages retrieved successfully",
        data={
            "messages": [
                {"id": g.id, "name": g.name, "email": g.email, "message": g.message, "status": g.status}
                for g in guests
            ],
            "total": len(guests)
        }
    )
