"""
Accident Analytics Settings

Configuration management using Pydantic settings with environment variable support.
"""

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Accident Analytics service configuration"""

    # Service Configuration
    service_name: str = Field(default="accident-analytics-service", description="Service name")
    environment: str = Field(default="development", description="Environment (development, production)")
    port: int = Field(default=8010, description="Service port")
    host: str = Field(default="0.0.0.0", description="Service host")

    # Remote Case Store
    # Unset means the case store runs on its process-local list only.
    database_url: Optional[str] = Field(
        default=None,
        description="Async database URL for the remote case mirror (e.g. sqlite+aiosqlite:///./cases.db)"
    )

    # Evidence Upload Configuration
    max_file_size_mb: int = Field(default=200, description="Maximum evidence file size in MB")
    allowed_file_types: str = Field(
        default=".mp4,.mov,.avi,.webm,.mkv,.pdf,.doc,.docx,.png,.jpg,.jpeg,.mp3,.wav,.m4a,.ogg",
        description="Allowed evidence file extensions (comma-separated)"
    )

    # Evidence Blob Storage
    storage_provider: str = Field(default="local", description="Blob storage provider: local or s3")
    storage_local_path: str = Field(default="./data/evidence", description="Base directory for local blobs")
    s3_bucket_name: Optional[str] = Field(default=None, description="S3 bucket (required when STORAGE_PROVIDER=s3)")
    s3_endpoint_url: Optional[str] = Field(default=None, description="S3/MinIO endpoint URL")
    s3_region: Optional[str] = Field(default="us-east-1", description="AWS region")
    s3_prefix: str = Field(default="", description="Key prefix for evidence blobs in the bucket")

    # Analysis Collaborator
    analysis_provider: str = Field(default="gemini", description="Analysis provider: gemini or anthropic")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-3-pro-preview", description="Gemini model name")
    gemini_thinking_budget: int = Field(default=32768, description="Gemini thinking token budget")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(default="claude-sonnet-4-5", description="Anthropic model name")
    max_output_tokens: int = Field(default=65536, description="Maximum tokens in the report response")

    # Analysis Pipeline
    analysis_timeout_seconds: float = Field(default=180.0, gt=0, description="Collaborator call timeout")
    status_interval_seconds: float = Field(default=1.2, gt=0, description="Status message cadence while waiting")
    validation_step_delay_seconds: float = Field(default=0.8, ge=0, description="Simulated delay per validation check")
    retry_cooldown_seconds: float = Field(default=3.0, ge=0, description="Cool-down before Failed returns to Intake")
    auto_retry_analysis: bool = Field(default=False, description="Re-run analysis automatically after the cool-down")
    max_auto_retries: int = Field(default=2, ge=0, description="Upper bound on automatic retries per run")
    default_physics_method: str = Field(default="Auto-Detect", description="Default physics method preference")

    # Simulated reports are only accepted when this is explicitly enabled.
    allow_simulated_fallback: bool = Field(
        default=False,
        description="Permit the collaborator to return a simulated report when evidence is insufficient"
    )
    strict_liability_balance: bool = Field(
        default=False,
        description="Reject reports whose liability percentages do not sum to 100 (+/-1)"
    )

    # Sessions
    session_ttl_seconds: int = Field(default=86400, description="Session token lifetime")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def max_file_size_bytes(self) -> int:
        """Convert max file size from MB to bytes"""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_extensions(self) -> List[str]:
        """Parse allowed file types into list"""
        return [ext.strip() for ext in self.allowed_file_types.split(",")]

    @property
    def remote_store_configured(self) -> bool:
        return bool(self.database_url)


# Global settings instance
settings = Settings()
