# Deploy: set secrets and run 'uvicorn server:app --host=0.0.0.0 --port=8000'
import logging
import os

from dotenv import load_dotenv
from fastapi.middleware.cors import CORSMiddleware

from roster_checkin.api import create_app
from roster_checkin.config import load_settings

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), handlers=[logging.StreamHandler()])
logger = logging.getLogger("roster_checkin")

settings = load_settings()
if not settings.sheets_api_key:
    logger.warning("SHEETS_API_KEY is not set. The values API fallback will be unavailable.")
if not settings.sheets_access_token:
    logger.warning("SHEETS_ACCESS_TOKEN is not set. Adding members needs a key with edit access.")

app = create_app(settings)
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


__all__ = ["app"]
