# App configuration using Pydantic BaseSettings (loads from .env or defaults).

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./cardapio.sqlite"

    # every schedule is evaluated on Brasília wall-clock time
    STORE_TIMEZONE: str = "America/Sao_Paulo"

    DEFAULT_COUNTRY_CODE: str = "55"
    WHATSAPP_BASE_URL: str = "https://wa.me"

    CART_NAMESPACE: str = "cardapio-cart"
    CUSTOMER_NAMESPACE: str = "rmenu_customer_data"

    LOG_LEVEL: str = "INFO"

    STORES_CSV: str | None = None
    HOURS_CSV: str | None = None
    PRODUCTS_CSV: str | None = None
    OPTIONS_CSV: str | None = None
    ZONES_CSV: str | None = None

    class Config:
        env_file = ".env"

settings = Settings()
