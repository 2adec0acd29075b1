from fastapi import APIRouter

from keygate.ai_gateway.router import router as ai_gateway_router

api_router = APIRouter()
api_router.include_router(ai_gateway_router, prefix="/ai-gateway", tags=["ai-gateway"])
