from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Used by the seed script when RLS is enabled
    db_schema: str = "public"
    db_timeout: int = 10  # seconds, PostgREST request timeout

    # Auth tokens are HS256 JWTs carrying "email" and "name" claims
    jwt_secret: str = Field(default="", validation_alias=AliasChoices("jwt_secret", "shifttree_jwt_pk"))
    jwt_algorithm: str = "HS256"

    # App
    app_name: str = "shifttree-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("port", "shifttree_port"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()


def get_settings() -> Settings:
    return settings
