from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PARAMETERS_FILE: str = ""
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    NARRATIVE_ENABLED: bool = False
    NARRATIVE_MODEL_TIER: str = "standard"
    NARRATIVE_MAX_TOKENS: int = 1200

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
