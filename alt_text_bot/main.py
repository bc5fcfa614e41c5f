# alt_text_bot/main.py

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging

# Load .env before settings are read.
load_dotenv()

from .config import settings
from .database.connection import close_mongo_connection, connect_to_mongo
from .auth.auth_dependency import verify_webhook_secret
from .utils import setup_logging
from .api.analyze import router as analyze_router
from .routers.hook_routes import router as hook_router

setup_logging()

logger = logging.getLogger("alt_text_bot.main")


app = FastAPI(
    title="Alt Text Bot",
    description="Checks published posts for image accessibility issues and keeps one feedback comment per post up to date.",
    version="1.2.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info("Alt Text Bot is starting up...")
    await connect_to_mongo()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Alt Text Bot is shutting down.")
    await close_mongo_connection()


webhook_auth = [Depends(verify_webhook_secret)]
app.include_router(hook_router, prefix="/api", tags=["Hooks"], dependencies=webhook_auth)
app.include_router(analyze_router, prefix="/api", tags=["Scan"], dependencies=webhook_auth)


@app.get("/")
async def read_root():
    logger.info("API root endpoint hit.")
    return {"message": "Alt Text Bot is running!"}
