"""
FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from app.api.v1 import challenges, leaderboard, workouts

app = FastAPI(
    title="PumpUp Workout API",
    description="Push-up workout sessions, challenges and leaderboards",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI at /docs
    redoc_url="/redoc",  # ReDoc at /redoc
    openapi_url="/openapi.json",  # OpenAPI JSON schema
)


def custom_openapi():
    """Custom OpenAPI schema with security schemes."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "Bearer": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT issued by the account service.",
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.include_router(workouts.router, prefix="/api/v1", tags=["workouts"])
app.include_router(challenges.router, prefix="/api/v1", tags=["challenges"])
app.include_router(leaderboard.router, prefix="/api/v1", tags=["leaderboard"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "PumpUp Workout API"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}
