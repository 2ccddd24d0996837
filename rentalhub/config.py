# rentalhub/config.py
from __future__ import annotations

from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RENTALHUB_", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod

    # ---- Marketplace API ----
    api_base_url: str = "http://localhost:3000"
    request_timeout_seconds: float = 20.0
    list_limit: int = 9999  # list endpoints are read in one page

    # ---- Client state (token + cached user snapshot) ----
    state_file: str = "~/.rentalhub/state.json"

    # ---- Logging ----
    log_level: str = "INFO"
    log_format: str = "json"  # json|text

    # ---- Payment result page ----
    result_page_host: str = "127.0.0.1"
    result_page_port: int = 5173
    open_browser: bool = True

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        # Hard fail: bearer tokens must not travel over plain http in prod
        if is_prod:
            parsed = urlparse(self.api_base_url)
            if parsed.scheme == "http" and (parsed.hostname or "") not in _LOCAL_HOSTS:
                raise ValueError("SECURITY: api_base_url must use https in prod")


settings = Settings()
