from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Odin Gym Booking"
    API_V1_STR: str = "/api"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Public site (magic link / password reset redirects land here)
    SITE_URL: str = "http://localhost:5500/"

    # Gym configuration (weekly hours, admin emails, trial keywords)
    GYM_CONFIG_PATH: str = "data/gym_config.json"

    # Remote query race (seconds)
    QUERY_TIMEOUT_SECONDS: float = 10.0

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_PATH: str = "logs/errors.log"

    # Static content generator
    CONTENT_INDEX_PATH: str = "index.html"
    CONTENT_SNAPSHOT_PATH: str = "assets/data.json"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
