# Configuration settings for the service

import os

from . import __version__


class Settings:
    """Application settings"""

    # Application
    APP_NAME: str = "TLS Chain Inspector"
    APP_VERSION: str = __version__
    DEBUG: bool = os.getenv("DEBUG", "OFF").upper() == "ON"

    # HTTP listener
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))

    # Outbound TLS
    TLS_PORT: int = int(os.getenv("TLS_PORT", "443"))
    CONNECT_TIMEOUT: float = float(os.getenv("CONNECT_TIMEOUT", "5"))

    # Trust anchors: "system" or "mozilla"
    TRUST_STORE: str = os.getenv("TRUST_STORE", "system")

    # Logging
    LOG_LEVEL: str = "DEBUG" if DEBUG else "INFO"


# Global settings instance
settings = Settings()
