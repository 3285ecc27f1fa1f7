"""
API routes for the investment calculators.
"""

from fastapi import APIRouter

from recalc.api import calculations, investments

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(investments.router, prefix="/calculate", tags=["investments"])
