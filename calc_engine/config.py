from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Laser Calculation Engine"
    ENGINE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"  # comma-separated

    # Compute stages slower than this are logged at WARNING
    SLOW_CALCULATION_MS: float = 100.0

    # Ranked recommendations returned by selection-style calculators
    MAX_RECOMMENDATIONS: int = 3

    class Config:
        env_file = ".env"


settings = Settings()
