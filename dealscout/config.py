from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database (sqlite+aiosqlite locally, postgresql+asyncpg in deployments)
    DATABASE_URL: str = "sqlite+aiosqlite:///./dealscout.db"
    DB_ECHO: bool = False

    # API Settings
    API_PREFIX: str = "/api"

    # Sync queue (upstream entity-status writes)
    SYNC_MAX_ATTEMPTS: int = 3

    # Scoring
    NEUTRAL_SCORE: float = 50.0
    DEFAULT_POSITIVE_WEIGHT: float = 0.5
    DEFAULT_NEGATIVE_WEIGHT: float = -0.3
    DEFAULT_RED_FLAG_WEIGHT: float = -0.5
    HIGHLIGHT_MULTIPLIER: float = 20.0
    RED_FLAG_MULTIPLIER: float = 30.0

    # Recommendation thresholds (inclusive lower bounds)
    STRONG_PASS_THRESHOLD: int = 80
    SOFT_PASS_THRESHOLD: int = 60
    BORDERLINE_THRESHOLD: int = 40

    # Bulk actions
    AUTO_DISLIKE_THRESHOLD: int = 20
    TOP_WEIGHTS_LIMIT: int = 10

    class Config:
        env_file = ".env"

settings = Settings()
