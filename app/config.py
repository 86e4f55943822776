import os
from dotenv import load_dotenv

# Load .env (VS Code terminals sometimes don't inject env vars)
load_dotenv()


class Settings:
    """Runtime configuration read from the environment"""

    def __init__(self):
        self.environment = os.getenv("APP_ENV", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
        self.cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        self.stripe_secret_key = os.getenv("STRIPE_SECRET_KEY")
        self.stripe_api_base = os.getenv("STRIPE_API_BASE", "https://api.stripe.com/v1")
        self.payment_currency = os.getenv("PAYMENT_CURRENCY", "inr")
        self.payment_timeout = float(os.getenv("PAYMENT_TIMEOUT", "10"))

        self.token_ttl_hours = int(os.getenv("TOKEN_TTL_HOURS", str(24 * 30)))

        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user = os.getenv("SMTP_USER")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.mail_from = os.getenv("MAIL_FROM", "orders@localhost")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
