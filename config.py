from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Review API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_review.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Uploads (metadata only; file bytes are stored elsewhere)
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_content_types: str = (
        "application/pdf,image/jpeg,image/png,application/msword,"
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )

    # Empty URL -> in-process reference scorer
    scoring_service_url: str = ""
    scoring_timeout_seconds: float = 5.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def content_types(self) -> set[str]:
        return {c.strip() for c in self.allowed_content_types.split(",") if c.strip()}

    @property
    def uses_remote_scoring(self) -> bool:
        return bool(self.scoring_service_url.strip())


settings = Settings()
