import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

ALGORITHM = "HS256"


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 5000
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "content_library"
    jwt_secret: str = "dev-secret-key-change"
    jwt_algorithm: str = ALGORITHM
    token_expire_days: int = 7
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment (and a local .env, if any)."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            database_url=os.getenv("DATABASE_URL") or os.getenv("MONGODB_URI") or "mongodb://localhost:27017",
            database_name=os.getenv("DATABASE_NAME", "content_library"),
            jwt_secret=os.getenv("JWT_SECRET", "dev-secret-key-change"),
            token_expire_days=int(os.getenv("TOKEN_EXPIRE_DAYS", "7")),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
