from pydantic import ConfigDict
from pydantic_settings import BaseSettings
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Storage backend: True reads goals/tasks from the local key-value store,
    # False reads them from Supabase
    USE_LOCAL_DATA: bool = True
    DATA_USER_ID: str = ""

    # Day boundaries (week start, streaks, deadlines) are computed in this zone
    # unless the caller passes one explicitly
    DEFAULT_TIMEZONE: str = "UTC"

    # Redis (local key-value store + insights cache). Empty = in-memory store.
    REDIS_URL: str = ""

    # Supabase (remote goal/task storage)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # Remote AI insights endpoint
    INSIGHTS_API_BASE_URL: str = "https://dreampath-api.vercel.app"
    INSIGHTS_API_PATH: str = "/api/analytics-insights"
    INSIGHTS_REQUEST_TIMEOUT_SECONDS: float = 30.0
    INSIGHTS_MAX_RETRIES: int = 1
    INSIGHTS_RETRY_DELAY_SECONDS: float = 1.0

    # Insights cache
    INSIGHTS_CACHE_KEY: str = "@dreampath_ai_insights_record"
    INSIGHTS_CACHE_TTL_DAYS: int = 7

    # Report a streak only if the latest completion was today or yesterday
    STREAK_REQUIRE_RECENT: bool = False

    # CORS
    ALLOWED_ORIGINS: str = "*"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def insights_endpoint_url(self) -> str:
        return self.INSIGHTS_API_BASE_URL.rstrip("/") + self.INSIGHTS_API_PATH

    model_config = ConfigDict(
        env_file=[".env.local", ".env"],
        case_sensitive=True,
        extra="ignore",
    )


# Create settings instance
settings = Settings()
