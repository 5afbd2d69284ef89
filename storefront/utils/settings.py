# storefront/utils/settings.py
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", 7 * 24 * 60 * 60))

SHOP_NAME = os.getenv("SHOP_NAME", "SUPERMARKET")
CURRENCY = os.getenv("CURRENCY", "SGD")

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")

PAYPAL_CLIENT_ID = os.getenv("PAYPAL_CLIENT_ID", "").strip()
PAYPAL_CLIENT_SECRET = os.getenv("PAYPAL_CLIENT_SECRET", "").strip()
# sandbox: https://api-m.sandbox.paypal.com, live: https://api-m.paypal.com
PAYPAL_API = os.getenv("PAYPAL_API", "https://api-m.sandbox.paypal.com").strip()

HITPAY_API_KEY = os.getenv("HITPAY_API_KEY", "").strip()
HITPAY_SALT = os.getenv("HITPAY_SALT", "").strip()
HITPAY_API = os.getenv("HITPAY_API", "https://api.sandbox.hit-pay.com").strip()
HITPAY_POLL_ATTEMPTS = int(os.getenv("HITPAY_POLL_ATTEMPTS", 5))
HITPAY_POLL_DELAY_SECONDS = float(os.getenv("HITPAY_POLL_DELAY_SECONDS", 2))

PROVIDER_TIMEOUT_SECONDS = int(os.getenv("PROVIDER_TIMEOUT_SECONDS", 15))

RESEND_API_KEY = os.getenv("RESEND_API_KEY", "").strip()
MAIL_SENDER = os.getenv("MAIL_SENDER", "Supermarket <receipts@example.com>")

STATIC_DIR = Path(os.getenv("STATIC_DIR", BASE_DIR / "static"))
IMAGES_DIR = STATIC_DIR / "images"
UPLOADS_DIR = STATIC_DIR / "uploads"
RECEIPTS_DIR = STATIC_DIR / "receipts"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# konto admina zakladane przy starcie, rejestracja daje tylko role "user"
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "").strip().lower()
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
