from pydantic_settings import BaseSettings

APP_VERSION = "1.0.0"

# Environments in which the phase override is honoured
TESTING_ENVS = ("dev", "test")


class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ENV: str = "dev"  # "dev", "test" or "prod"

    # --- ALLOCATION PHASE SETTINGS ---
    # Forces a phase (e.g. "subcomm_concurrent_ranking") for manual testing.
    # Ignored unless ENV is one of TESTING_ENVS.
    PHASE_OVERRIDE: str | None = None
    DISPLAY_TIMEZONE: str = "UTC"

    REDIS_URL: str | None = None
    FRONTEND_URL: str = "http://localhost:3000"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_testing_mode(self) -> bool:
        return self.ENV != "prod"


settings = Settings()
