"""Primary API router definition."""

from fastapi import APIRouter

from . import goals, leaderboard, points, students

api_router = APIRouter()

api_router.include_router(students.router)
api_router.include_router(goals.router)
api_router.include_router(points.router)
api_router.include_router(leaderboard.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic liveness check."""
    return {"status": "ok"}
