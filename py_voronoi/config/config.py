from pathlib import Path
from typing import Literal

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Load .env for local runs, only filling values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Library settings pulled from VORONOI_* environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["plain", "json"] = Field(default="plain", description="Logging format (plain or json)")

    # Input Configuration
    min_site_distance: float = Field(default=1.0, gt=0, description="Minimum distance between accepted sites")
    sanitize_input: bool = Field(default=True, description="Reject sites closer than min_site_distance")

    # Sweep Configuration
    bounds_padding: float = Field(default=10.0, ge=0, description="Padding added around the site extent")
    proxy_depth_factor: float = Field(default=2.0, gt=0, description="Proxy depth below the sites, in bounds heights")

    # Scheduling Configuration
    work_budget_ms: int = Field(default=16, ge=0, description="Default time budget for one timed work slice")

    class Config:
        env_prefix = "VORONOI_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # the .env file may hold unrelated variables


# Instantiate singleton settings object
settings = Settings()
