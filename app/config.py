import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./backoffice.db")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "GianConstruct <noreply@gianconstruct.com>")

# Internal address that receives new inquiry and appointment update emails
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "admin@gianconstruct.com")

# Frontend base URL used in notification links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Availability window used by cleanup / slot-duration regeneration (days from today)
AVAILABILITY_WINDOW_DAYS = int(os.getenv("AVAILABILITY_WINDOW_DAYS", "14"))

# Background tasks
# Set BACKGROUND_TASKS_ENABLED=false when an arq worker owns the sweeps instead
BACKGROUND_TASKS_ENABLED = os.getenv("BACKGROUND_TASKS_ENABLED", "true").lower() == "true"
PDC_AUTO_ISSUE_INTERVAL_SECONDS = int(os.getenv("PDC_AUTO_ISSUE_INTERVAL_SECONDS", str(24 * 60 * 60)))
EVENT_DISPATCH_INTERVAL_SECONDS = int(os.getenv("EVENT_DISPATCH_INTERVAL_SECONDS", "30"))
EVENT_MAX_ATTEMPTS = int(os.getenv("EVENT_MAX_ATTEMPTS", "3"))
EVENT_DISPATCH_BATCH_SIZE = int(os.getenv("EVENT_DISPATCH_BATCH_SIZE", "50"))

# Post-dated checks
CHECK_NUMBER_PREFIX = os.getenv("CHECK_NUMBER_PREFIX", "CBC-")
