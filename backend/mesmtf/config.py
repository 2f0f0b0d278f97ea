import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level above backend/)
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

SESSIONS_TABLE = os.getenv("SESSIONS_TABLE", "diagnosis_sessions")
SESSION_SYMPTOMS_TABLE = os.getenv("SESSION_SYMPTOMS_TABLE", "diagnosis_session_symptoms")
PERSIST_TIMEOUT_SECONDS = float(os.getenv("PERSIST_TIMEOUT_SECONDS", "3.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
