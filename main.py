import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from app.core.config import settings
from app.core.logging_config import logger
from app.routers import optimization, traffic

app = FastAPI(
    title="Snailtrail Route Optimization API", 
    version="1.0.0",
    redirect_slashes=False  # Disable automatic redirects to prevent POST data loss
)

# Configure CORS for the planner frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(optimization.router, prefix="/api/optimize", tags=["Optimization"])
app.include_router(traffic.router, prefix="/api/traffic", tags=["Traffic"])

logger.info(f"Snailtrail API starting (environment={settings.ENVIRONMENT})")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Snailtrail API"


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
