from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    supabase_url: str = ""
    supabase_key: str = ""
    supabase_max_retries: int = 3

    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_timeout: float = 30.0

    user_timezone: str = "Asia/Seoul"
    # Identity recorded as assignee on todos created by the assistant
    current_user: str = "나"

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    log_level: str = "INFO"

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def has_anthropic(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_llm(self) -> bool:
        return self.has_gemini or self.has_openai or self.has_anthropic

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()
