from fastapi import APIRouter, HTTPException

from jobsearch import geo

router = APIRouter(prefix="/api/geo", tags=["geo"])


@router.get("/regions")
async def list_regions() -> dict:
    return {
        "metropolitan": geo.metropolitan_regions(),
        "overseas": geo.overseas_regions(),
    }


@router.get("/regions/{region}")
async def get_region(region: str) -> dict:
    if not geo.is_valid_region(region):
        raise HTTPException(status_code=404, detail="Region not found")
    return {"region": region, "departments": list(geo.departments_of(region))}


@router.get("/departments/{code}")
async def get_department(code: str) -> dict:
    return {"department": code, "region": geo.region_of(code)}
