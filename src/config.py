"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dice.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Asset catalog
    ASSET_MANIFEST_PATH: str = "src/data/dice_assets.json"
    ASSET_URL_PREFIX: str = "/dice"
    COMPATIBILITY_RULES_PATH: str = "src/data/dice_compatibility.json"

    # 레벨 계산은 외부 서비스 담당. 요청에 없을 때의 기본값.
    DEFAULT_USER_LEVEL: int = 1


settings = Settings()
