import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Initialize environment configuration from local or project-level .env files
dotenv_paths = [
    os.path.join(os.path.dirname(__file__), '.env'),
    os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'),
    os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env.example')
]


def load_environment() -> None:
    """
    Loads the first .env file found on the lookup path into os.environ.

    Variables that are already set in the process environment win.
    """
    for path in dotenv_paths:
        if os.path.exists(path):
            load_dotenv(path)
            break


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    DATABASE_URL: str = "sqlite:///catalog.db"
    LOG_LEVEL: str = "INFO"
    SEED_ON_STARTUP: bool = True
    PORT: int = 8000
    CORS_ORIGINS: str = "*"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds settings from the process environment after loading .env files.

        Returns:
            A frozen Settings instance.
        """
        load_environment()
        return cls(
            DATABASE_URL=os.environ.get("DATABASE_URL", cls.DATABASE_URL),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            SEED_ON_STARTUP=_env_flag("SEED_ON_STARTUP", "true"),
            PORT=int(os.environ.get("PORT", cls.PORT)),
            CORS_ORIGINS=os.environ.get("CORS_ORIGINS", cls.CORS_ORIGINS),
        )

    @property
    def cors_origins(self):
        if self.CORS_ORIGINS.strip() == "*":
            return "*"
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
