from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    gemini_api_key: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    oauth_redirect_uri: str = "http://localhost:8000/auth/callback"
    token_dir: str = "./tokens"
    oauth_state_ttl_minutes: int = 10
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"
    default_timezone: str = "Asia/Kolkata"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.7
    llm_timeout_seconds: Optional[float] = 30.0
    calendar_timeout_seconds: Optional[float] = 30.0
    session_idle_minutes: int = 5
    session_sweep_seconds: int = 60
    log_level: str = "INFO"
    log_json: bool = False
    
    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
