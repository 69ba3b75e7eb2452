from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"

    default_annual_rate_pct: float = 9.0
    default_basis: int = 365

    report_font: str = "Calibri"
    currency_symbol: str = "$"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"

settings = Settings()
