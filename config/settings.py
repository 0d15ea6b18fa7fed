"""
Neon Market - Centralized Configuration
========================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
import sys
from dotenv import load_dotenv

load_dotenv()


# ==========================================
# Database
# ==========================================
DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    print("[ERROR] Critical: DATABASE_URL missing in .env")
    sys.exit(1)


# ==========================================
# Security
# ==========================================
SECRET_KEY = os.getenv("SECRET_KEY", "")

if len(SECRET_KEY) < 32:
    print("[ERROR] Critical: SECRET_KEY missing in .env (at least 32 characters)")
    sys.exit(1)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days
SESSION_MAX_AGE_SECONDS = 60 * 60 * 8      # 8 hours

COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

PASSWORD_MIN_LENGTH = 12
PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS") or "260000")


# ==========================================
# Email (SMTP)
# ==========================================
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT") or "587")
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_SECURE = os.getenv("SMTP_SECURE", "false").lower() == "true"
MAIL_FROM = os.getenv("MAIL_FROM", "")


# ==========================================
# WhatsApp (Twilio)
# ==========================================
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_WHATSAPP_FROM = os.getenv("TWILIO_WHATSAPP_FROM", "")
TWILIO_API_URL = os.getenv("TWILIO_API_URL", "https://api.twilio.com/2010-04-01")


# ==========================================
# Telegram
# ==========================================
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_API_URL = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")


# ==========================================
# Delivery
# ==========================================
CHANNEL_TIMEOUT_SECONDS = float(os.getenv("CHANNEL_TIMEOUT_SECONDS") or "10")


# ==========================================
# Invoices
# ==========================================
INVOICE_DIR = os.getenv("INVOICE_DIR", os.path.join("storage", "invoices"))
STORE_NAME = os.getenv("STORE_NAME", "Cyberpunk Neon Market")
CURRENCY = os.getenv("CURRENCY", "MXN")


# ==========================================
# App
# ==========================================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Public base URL used to build invoice links
APP_URL = os.getenv("APP_URL", "http://localhost:8000").rstrip("/")
