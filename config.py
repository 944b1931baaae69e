"""
config.py: Application configuration.
"""
import os

# Logging
LOG_LEVEL = os.environ.get("QKD_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# QKD link
PHOTON_COUNT = int(os.environ.get("QKD_PHOTON_COUNT", "40"))
PHOTON_PACE_MS = int(os.environ.get("QKD_PHOTON_PACE_MS", "20"))   # desktop animation only
INTERSECTION_COOLDOWN = float(os.environ.get("QKD_INTERSECTION_COOLDOWN", "2.0"))  # seconds
INTERSECTION_DISTANCE = float(os.environ.get("QKD_INTERSECTION_DISTANCE", "5.0"))  # scene units

# Narrative analysis (Gemini)
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_API_URL = os.environ.get(
    "GEMINI_API_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent",
)
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "20"))

# HTTP service
SERVER_HOST = os.environ.get("QKD_SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.environ.get("QKD_SERVER_PORT", "8000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "QKD_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]
