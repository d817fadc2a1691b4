"""ReviewGate configuration — loaded from environment / .env file."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

WORKFLOW_DIR = ".spec-workflow"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="REVIEWGATE_", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"

    # Project whose artifacts are under review
    project_root: Path = Path(".")
    # Empty = sqlite file inside <project_root>/.spec-workflow/
    database_url: str = ""

    # Diff / realtime tuning
    diff_context_lines: int = 3
    subscriber_queue_size: int = 32

    cors_origins: list[str] = ["http://localhost:3000"]


settings = Settings()
