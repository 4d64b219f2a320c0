"""API v1 router composition."""

from fastapi import APIRouter

from wastelog.api.v1.endpoints import auth, branches, reviews, waste_records

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(branches.router, prefix="/branches", tags=["branches"])
api_router.include_router(waste_records.router, prefix="/waste-records", tags=["waste-records"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
