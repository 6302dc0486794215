from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MULTITEMP_",
        extra="ignore",
    )

    app_name: str = "multitemp"

    LOG_DIR: str | None = None
    DEBUG_MODE: bool = False

    # Defaults for KeyedTempFileConfig fields left unset by the caller.
    TMP_DIR: str | None = None
    TMP_UNLINK: bool = True
    TMP_ENCODING: str = "utf-8"


settings = Settings()
