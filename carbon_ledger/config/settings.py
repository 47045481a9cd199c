from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    persistence_backend: Literal["memory", "json"] = "memory"
    data_dir: str = ".carbon_ledger"
    default_mode: Literal["standard", "advanced"] = "standard"
    reporting_year: Optional[int] = None  # None -> current calendar year
    autosave: bool = True
    audit_log_size: int = 1000  # most recent mutation records kept in memory
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_prefix = "CARBON_LEDGER_"
