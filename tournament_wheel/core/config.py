from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATA_DIR: str = "data"
    TEAMS_FILE: str = "teams.json"
    BRACKETS_FILE: str = "brackets.json"

    # When enabled, saving a bracket whose revision is behind the stored one raises ConflictError.
    # Off by default: the last save wins.
    OPTIMISTIC_LOCKING: bool = False

    LOG_LEVEL: str = "INFO"

    # Admin dashboard
    RECENT_TOURNAMENTS_LIMIT: int = 5
    TOP_TEAMS_LIMIT: int = 5

    class Config:
        env_file = ".env"
        env_prefix = "WHEEL_"

settings = Settings()
