from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from the project root .env (if present).
PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")

# "sqlite://" is an in-memory database that lives as long as the process.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]
