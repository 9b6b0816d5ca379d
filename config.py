# config.py
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://127.0.0.1:5173,http://localhost:5173"


def _split_origins(raw: str) -> List[str]:
  return [x.strip() for x in raw.split(",") if x.strip()]


@dataclass(frozen=True)
class Settings:
  database_url: str
  cors_origins: List[str] = field(default_factory=lambda: _split_origins(DEFAULT_CORS_ORIGINS))
  log_level: str = "INFO"

  @classmethod
  def from_env(cls) -> "Settings":
    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url:
      raise RuntimeError("DATABASE_URL is not set in backend .env")
    return cls(
      database_url=database_url,
      cors_origins=_split_origins(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
      log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
