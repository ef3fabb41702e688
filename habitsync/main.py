import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from habitsync.config import CORS_ORIGINS
from habitsync.database import init_db
from habitsync.errors import register_error_handlers
from habitsync.routes.group_routes import router as group_router
from habitsync.routes.leaderboard_routes import router as leaderboard_router
from habitsync.routes.sync_routes import router as sync_router
from habitsync.routes.user_routes import router as user_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize db configuration
    init_db()
    yield


app = FastAPI(title="HabitSync", lifespan=lifespan)

# Configure CORS for Mobile App Support
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(sync_router)
app.include_router(leaderboard_router)
app.include_router(group_router)
app.include_router(user_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("habitsync.main:app", host="0.0.0.0", port=8000, reload=True)
