"""
Settings read from environment variables prefixed with CALC_ (or a .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # 0 = errors only, 1 = trace tree traversal, 2 = trace every node visit
    verbosity: int = 0

    prompt: str = "calc> "

    model_config = SettingsConfigDict(env_prefix="CALC_", env_file=".env", extra="ignore")
