# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./vinted_manager.db"
    UPLOAD_DIR: str = "static/uploads"
    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GOOGLE_AI_API_KEY: Optional[str] = None
    GEMINI_DESCRIPTION_MODEL: str = "gemini-2.5-pro"
    GEMINI_RESPONSES_MODEL: str = "gemini-2.5-flash"

    # Vinted import ladder
    VINTED_BASE_URL: str = "https://www.vinted.fr"
    IMPORT_STRATEGIES: List[str] = ["api_v2", "api_v1", "profile_html", "proxy_relay", "browser"]
    IMPORT_STRATEGY_DELAY: float = 1.0
    IMPORT_STRATEGY_TIMEOUT: float = 20.0
    IMPORT_PER_PAGE: int = 20
    IMPORT_BROWSER_ENABLED: bool = False

    # Optional external keep-alive pinger (utils/keep_alive.py)
    KEEP_ALIVE_URL: Optional[str] = None
    KEEP_ALIVE_INTERVAL: int = 180

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def gemini_key(self) -> Optional[str]:
        return self.GEMINI_API_KEY or self.GOOGLE_AI_API_KEY

settings = Settings()
