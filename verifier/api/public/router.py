from fastapi import APIRouter
from verifier.api.public import verification

router = APIRouter()
router.include_router(verification.router, prefix="/verification", tags=["Verification"])
