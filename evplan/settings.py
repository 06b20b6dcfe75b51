# evplan/settings.py
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="EV.AI Copilot")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # model provider: auto | gemini | openai | echo
    LLM_PROVIDER: str = Field(default="auto")
    GEMINI_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None

    # generation behaviour
    GROUNDING_ENABLED: bool = Field(default=True)
    STRICT_PLAN_VALIDATION: bool = Field(default=False)
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024)

    # in-memory sessions kept before the least recently used is evicted
    MAX_SESSIONS: int = Field(default=1000)

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME

    def resolve_provider(self) -> str:
        """Pick the collaborator to use when LLM_PROVIDER is 'auto'."""
        provider = self.LLM_PROVIDER.strip().lower()
        if provider != "auto":
            return provider
        if self.GEMINI_API_KEY:
            return "gemini"
        if self.OPENAI_API_KEY:
            return "openai"
        return "echo"


settings = Settings()
