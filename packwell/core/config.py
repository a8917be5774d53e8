"""Store Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Packwell Store"
    environment: str = "production"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = ["*"]

    # Principal tokens
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7

    # Checkout pricing (in rupees)
    free_shipping_threshold: float = 500.0
    flat_shipping_fee: float = 50.0
    order_number_prefix: str = "PW"

    # Mail relay
    mail_relay_url: Optional[str] = None
    mail_api_key: Optional[str] = None
    mail_from: str = "blowpack Plastic Industries <no-reply@packwell.in>"
    mail_timeout_seconds: float = 10.0
    company_email: Optional[str] = None
    admin_email: str = "blowpackplastic@gmail.com"

    # Startup
    seed_demo_catalog: bool = False
    seed_admin: bool = False
    admin_name: str = "Store Admin"

    class Config:
        env_prefix = "PACKWELL_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def mail_configured(self) -> bool:
        """Check if the mail relay is configured"""
        return bool(self.mail_relay_url and self.mail_api_key)

    @property
    def company_inbox(self) -> str:
        """Address for internal order notifications"""
        return self.company_email or self.admin_email


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
