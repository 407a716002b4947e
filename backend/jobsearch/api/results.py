import dataclasses

from fastapi import APIRouter, HTTPException, Response

from jobsearch.api.deps import SearchServiceDep, SettingsDep
from jobsearch.errors import NothingToExportError, SearchBusyError
from jobsearch.services.export import ExportFormat, ExportKind, render_export

router = APIRouter(tags=["results"])

_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


@router.get("/api/results")
async def list_results(service: SearchServiceDep) -> dict:
    collection = service.collection
    return {
        "offers": [dataclasses.asdict(offer) for offer in collection.job_offers()],
        "companies": [
            dataclasses.asdict(company) for company in collection.sorted_companies()
        ],
    }


@router.delete("/api/results", status_code=204)
async def clear_results(service: SearchServiceDep) -> None:
    if service.running:
        raise HTTPException(status_code=409, detail=str(SearchBusyError()))
    service.collection.clear()


@router.get("/api/export/{kind}.{fmt}")
async def export_results(
    kind: ExportKind,
    fmt: ExportFormat,
    service: SearchServiceDep,
    settings: SettingsDep,
) -> Response:
    try:
        content = render_export(
            service.collection,
            kind,
            fmt,
            separator=settings.export_csv_separator,
            encoding=settings.export_csv_encoding,
        )
    except NothingToExportError as exc:
        raise HTTPException(status_code=404, detail="nothing to export") from exc

    if fmt == ExportFormat.CSV:
        filename = settings.export_filename_csv
        media_type = f"{_MEDIA_TYPES[fmt]}; charset={settings.export_csv_encoding}"
    else:
        filename = settings.export_filename_json
        media_type = _MEDIA_TYPES[fmt]
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
