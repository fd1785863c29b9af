import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Security
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key_change_in_production")

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL")
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "2"))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "3"))
    DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "1800"))  # 30 min

    # Photo storage (GCS when the bucket is set, local folder otherwise)
    GCP_STORAGE_BUCKET = os.getenv("GCP_STORAGE_BUCKET")
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "controle_qualidade/static/uploads")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Cron endpoints (Cloud Scheduler)
    CRON_SECRET_TOKEN = os.getenv("CRON_SECRET_TOKEN")

    # Dashboard
    DASHBOARD_BUCKET_DAYS = int(os.getenv("DASHBOARD_BUCKET_DAYS", "5"))
    RECENT_INSPECTIONS_LIMIT = int(os.getenv("RECENT_INSPECTIONS_LIMIT", "5"))

config = Config()
