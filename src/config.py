import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    DEBUG = os.getenv("FLASK_DEBUG", "1") == "1"
    SECRET_KEY = os.getenv("SECRET_KEY", "change_me")

    # External REST backend (system of record)
    BACKEND_API_URL = os.getenv("BACKEND_API_URL", "http://localhost:5000/api")
    BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "15"))

    # Optional: when unset, bearer tokens are only decoded for identity and the backend validates them
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # Billing defaults
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "INR")
    DEFAULT_TAX_RATE = os.getenv("DEFAULT_TAX_RATE", "18")
    DEFAULT_GST_TYPE = os.getenv("DEFAULT_GST_TYPE", "cgst_sgst")
    MONEY_PRECISION = int(os.getenv("MONEY_PRECISION", "2"))
    LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "5"))

    # In-memory snapshots and drafts
    SNAPSHOT_TTL = int(os.getenv("SNAPSHOT_TTL", "300"))  # seconds
    SNAPSHOT_MAX = int(os.getenv("SNAPSHOT_MAX", "256"))
    DRAFT_TTL = int(os.getenv("DRAFT_TTL", str(4 * 60 * 60)))
    DRAFT_MAX = int(os.getenv("DRAFT_MAX", "1000"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


class TestConfig(Config):
    DEBUG = False
    TESTING = True
    BACKEND_API_URL = "http://backend.test/api"
    JWT_SECRET_KEY = None
    SNAPSHOT_TTL = 60
