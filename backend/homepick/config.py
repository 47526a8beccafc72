from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./homepick.db"

    # Auth: "google" verifies Google ID tokens, "mock" accepts "mock:<email>" tokens
    auth_provider: str = "google"
    google_client_id: Optional[str] = None
    admin_email: str = "admin@homepick.kr"

    # Kakao Maps / Local API
    kakao_rest_api_key: Optional[str] = None
    map_default_lat: float = 37.5665  # Seoul City Hall
    map_default_lng: float = 126.9780
    map_default_level: int = 7
    map_search_limit: int = 5  # Places results used to fit the map bounds

    # Seed the news collection with sample articles when it is empty
    seed_sample_news: bool = False

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/app.log"  # Path relative to backend dir; empty to disable file logging

    @property
    def default_center(self):
        return (self.map_default_lat, self.map_default_lng)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
