from fastapi import APIRouter
from api.v1.routes.credentials import router as credentials_router


router = APIRouter()
router.include_router(credentials_router)
