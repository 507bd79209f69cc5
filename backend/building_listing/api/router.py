from fastapi import APIRouter

from building_listing.api.v1 import buildings, health, leases, pdf

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(buildings.router, prefix="/buildings", tags=["buildings"])
api_router.include_router(leases.router, prefix="/leases", tags=["leases"])
api_router.include_router(pdf.router, prefix="/pdf", tags=["pdf"])
