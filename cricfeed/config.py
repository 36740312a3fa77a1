from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    cricbuzz_base_url: str = "https://www.cricbuzz.com"
    live_path: str = "/cricket-match/live-scores"
    upcoming_path: str = "/cricket-schedule/upcoming-series/international"

    # Transport: bounded attempts, retry only on 408/429/5xx
    request_timeout_seconds: float = 12.0
    max_attempts: int = 2
    retry_backoff_seconds: float = 0.0  # exponential backoff multiplier, 0 retries at once
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def live_url(self) -> str:
        return f"{self.cricbuzz_base_url}{self.live_path}"

    @property
    def upcoming_url(self) -> str:
        return f"{self.cricbuzz_base_url}{self.upcoming_path}"


settings = Settings()
