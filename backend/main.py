import logging
import os
import sys

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import APP_NAME
from database import init_db
from routes.event_routes import router as event_router
from routes.goal_routes import router as goal_router
from routes.habit_routes import router as habit_router
from routes.log_routes import router as log_router
from routes.notification_routes import router as notification_router
from routes.social_routes import router as social_router
from routes.user_routes import router as user_router
from services.errors import TrackerError

logger = logging.getLogger(__name__)

# Initialize db configuration
try:
    init_db()
except Exception as e:
    logger.error(f"Database init skipped or failed: {e}")

app = FastAPI(title=f"{APP_NAME} API")

@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}

@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# Configure CORS for the web and mobile clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (
    user_router,
    habit_router,
    goal_router,
    log_router,
    notification_router,
    social_router,
    event_router,
):
    app.include_router(router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
