"""CORS configuration for the application."""

from typing import List


class CORSConfig:
    """Configuration for CORS middleware."""

    # Frontend dev server and the backend itself
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    ALLOWED_METHODS: List[str] = ["GET", "POST", "OPTIONS"]

    ALLOWED_HEADERS: List[str] = [
        "Accept",
        "Content-Type",
        "X-Requested-With",
    ]

    # Session cookie must travel with cross-origin requests
    ALLOW_CREDENTIALS: bool = True

    MAX_AGE: int = 300

    @classmethod
    def get_cors_kwargs(cls) -> dict:
        """Get kwargs for CORSMiddleware configuration."""
        return {
            "allow_origins": cls.ALLOWED_ORIGINS,
            "allow_credentials": cls.ALLOW_CREDENTIALS,
            "allow_methods": cls.ALLOWED_METHODS,
            "allow_headers": cls.ALLOWED_HEADERS,
            "max_age": cls.MAX_AGE,
        }


cors_config = CORSConfig()
