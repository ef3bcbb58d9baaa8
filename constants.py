import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 5000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# 1:1 rooms only
ROOM_CAPACITY = 2
ROOM_ID_LENGTH = int(os.getenv("ROOM_ID_LENGTH", 6))

# Only forward signals between connections that share a room
STRICT_SIGNALING = os.getenv("STRICT_SIGNALING", "0").lower() in ("1", "true", "yes")
