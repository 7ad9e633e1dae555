from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Auth
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str = "sqlite:///./storefinder.db"

    # Photos
    UPLOADS_DIR: str = "public/uploads"
    PHOTO_WIDTH: int = 800
    DEFAULT_PHOTO: str = "store.png"

    # Catalog
    SLUG_MAX_ATTEMPTS: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
