import os

from dotenv import load_dotenv

load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT") or 3000)

# Path to the Firebase service account JSON
FIREBASE_CREDENTIALS = os.getenv("FIREBASE_CREDENTIALS", "serviceAccountKey.json")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID") or None

# Provider validates the message but does not deliver it
FCM_DRY_RUN = os.getenv("FCM_DRY_RUN", "false").strip().lower() in ("1", "true", "yes", "on")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

GREETING = os.getenv(
    "GREETING", "Hai, ini adalah REST API untuk aplikasi wisatanyware!"
)
