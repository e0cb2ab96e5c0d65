from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    app_env: str = "dev"
    store_backend: Literal["json", "sql"] = "json"
    data_file: Path = Path("workflows.json")
    database_url: str = "sqlite:///./workflows.db"
    cors_origins: List[str] = ["*"]
    frontend_dist: Optional[Path] = None
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"


settings = Settings()  # reads from env
