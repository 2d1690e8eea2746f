from fastapi import APIRouter
from app.api.v1.endpoints import evaluations, health, projects, teams

api_router = APIRouter()

# Deep health check endpoints (use /health/ready for load balancers)
api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint"""
    return {"status": "healthy", "service": "ipd-portal-backend"}


api_router.include_router(teams.router, prefix="/teams", tags=["Teams"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(evaluations.router, prefix="/evaluations", tags=["Evaluations"])
