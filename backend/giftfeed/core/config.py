from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "GiftFeed API"
    DEBUG: bool = False

    # Marketplace pages
    MARKET_BASE_URL: str = "https://marketapp.ws"
    GIFT_PAGE_BASE_URL: str = "https://t.me/nft"
    ATTRIBUTES_BASE_URL: str = "https://nft.fragment.com/gift"
    ALLOWED_PROVIDERS: list[str] = ["Marketapp", "Getgems", "Fragment"]
    DEFAULT_LIMIT: int = 10

    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    IMPERSONATE: str = "chrome120"  # curl_cffi browser fingerprint

    # Fetch strategies
    HTTP_FETCH_TIMEOUT_SEC: float = 0.8
    RENDER_ENABLED: bool = True
    RENDER_TIMEOUT_SEC: float = 3.0
    BROWSER_POOL_SIZE: int = 2
    BROWSER_HEADLESS: bool = True
    CANCEL_LOSING_STRATEGY: bool = True

    # Challenge page detection
    MIN_PAGE_LENGTH: int = 1500

    # Result cache
    CACHE_BACKEND: str = "memory"  # "memory" or "redis"
    CACHE_TTL_SEC: float = 5.0
    CACHE_SWEEP_INTERVAL_SEC: float = 30.0

    # Redis (only used with CACHE_BACKEND=redis)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def redis_url(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Attribute enrichment
    ATTRIBUTES_TIMEOUT_SEC: float = 3.0
    ATTRIBUTES_CONCURRENCY: int = 5
    ATTRIBUTES_CACHE_TTL_SEC: float = 300.0

    # Gift detail page
    GIFT_DETAIL_TIMEOUT_SEC: float = 2.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
