from datetime import timedelta

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    cors_origins: list[str] = ["*"]
    public_base_url: str = "http://localhost:3000"  # Used to build download links

    # Auth
    jwt_secret: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    token_expire_seconds: int = 18000  # 5 hours
    protect_api: bool = True
    auth_username: str = ""  # Empty means any non-empty credential pair is accepted
    auth_password: str = ""

    # Artifacts
    exports_dir: str = "./exports"
    retention_seconds: int = 3600
    sweep_schedule: str = "0 * * * *"

    # Upstream services
    upstream_timeout: float = 30.0
    stability_api_url: str = (
        "https://api.stability.ai/v1/generation/stable-diffusion-v1-6/text-to-image"
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def retention(self) -> timedelta:
        return timedelta(seconds=self.retention_seconds)

    @property
    def token_expires_in(self) -> timedelta:
        return timedelta(seconds=self.token_expire_seconds)


settings = Settings()
