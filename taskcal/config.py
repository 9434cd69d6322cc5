"""Configuration - task calendar settings"""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(override=True)


@dataclass
class Settings:
    """Service settings"""

    # HTTP API
    host: str = "127.0.0.1"
    port: int = 8790
    debug: bool = False

    # Durable slot
    data_dir: Path = field(default_factory=lambda: Path.home() / ".taskcal" / "data")
    slot_name: str = "calendarTasks"
    slot_format: str = "json"  # json / yaml

    # CSV export
    export_dir: Path = field(default_factory=lambda: Path("."))
    export_date_format: str = "%m-%d-%Y"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables"""
        return cls(
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8790")),
            debug=os.getenv("DEBUG", "").lower() in ("1", "true"),

            data_dir=Path(os.getenv(
                "TASKCAL_DATA_DIR", str(Path.home() / ".taskcal" / "data")
            )),
            slot_name=os.getenv("TASKCAL_SLOT_NAME", "calendarTasks"),
            slot_format=os.getenv("TASKCAL_SLOT_FORMAT", "json").lower(),

            export_dir=Path(os.getenv("TASKCAL_EXPORT_DIR", ".")),
            export_date_format=os.getenv("TASKCAL_EXPORT_DATE_FORMAT", "%m-%d-%Y"),

            log_level=os.getenv("TASKCAL_LOG_LEVEL", "INFO").upper(),
        )


# Global settings instance
settings = Settings.from_env()
