from fastapi import APIRouter
from perf_review.routers import employees, plans, activities, reviews, ratings, ai

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(plans.router, tags=["Plans"])
api_router.include_router(activities.router, tags=["Activities"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(ratings.router, tags=["Ratings"])
api_router.include_router(ai.router, tags=["AI"])
