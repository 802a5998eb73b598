from fastapi import APIRouter, Query

from app.services.geocoding import geocoding_service

router = APIRouter(prefix="/geocode", tags=["geocoding"])


@router.get("")
async def geocode_address(address: str = Query(..., min_length=3, max_length=255)):
    """Forward geocoding: free-text address to coordinates."""
    return await geocoding_service.geocode(address.strip())


@router.get("/reverse")
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180)
):
    """Reverse geocoding: coordinates to a display address."""
    return await geocoding_service.reverse(lat, lng)
