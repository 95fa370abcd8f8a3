"""
Application configuration
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "rjs-filter API"
    API_VERSION: str = "1.0.0"

    # r.js invocation
    RJS_NODE_PATH: str = "/usr/bin/node"  # empty: run r.js directly
    RJS_R_PATH: str = "/usr/lib/node_modules/requirejs/bin/r.js"
    RJS_BASE_URL: str = "/files/js"
    RJS_TEMP_DIR: str | None = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
