# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql")  # sql | redis
SHOP_API_URL = os.getenv("SHOP_API_URL", "http://localhost:5000")
HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", 5))
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/2")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

BASKET_TTL_MS = int(os.getenv("BASKET_TTL_MS", 60 * 60 * 1000))
SESSION_TTL_MS = int(os.getenv("SESSION_TTL_MS", 60 * 60 * 1000))
SESSION_CHECK_INTERVAL_SECONDS = float(os.getenv("SESSION_CHECK_INTERVAL_SECONDS", 60))

ADMIN_EMAILS = [
    e.strip()
    for e in os.getenv("ADMIN_EMAILS", "David.Wallace@Dunder.com,admin@Dunder.com").split(",")
    if e.strip()
]
