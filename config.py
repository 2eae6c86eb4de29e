import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    # When unset, write endpoints are open
    api_key: Optional[str] = os.getenv("API_KEY") or None

    # CLI client settings
    api_base_url: str = os.getenv(
        "API_BASE_URL",
        f"http://{os.getenv('API_HOST', '127.0.0.1')}:{os.getenv('API_PORT', '8000')}"
    )
    client_timeout: float = float(os.getenv("CLIENT_TIMEOUT", "10"))

    # Bookshelf settings
    book_id_length: int = int(os.getenv("BOOK_ID_LENGTH", "16"))

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Bookshelf API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
