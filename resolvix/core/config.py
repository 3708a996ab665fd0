from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
import secrets

class Settings(BaseSettings):
    # ----------------------------------
    # App General Info
    # ----------------------------------
    PROJECT_NAME: str = "Resolvix"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = Field(
        default="development",
        description="Current environment: development, testing, staging, or production"
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root log level applied at startup")

    # ----------------------------------
    # Relational Database (profiles, tickets, chat, logs)
    # ----------------------------------
    DATABASE_URL: str = Field(default="sqlite:///./resolvix.db")

    # ----------------------------------
    # Auth (JWT)
    # ----------------------------------
    JWT_SECRET_KEY: str = Field(
        default_factory=lambda: secrets.token_urlsafe(48),
        description="JWT signing secret. Set in .env for stable sessions.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)

    # ----------------------------------
    # Admin bootstrap (optional)
    # ----------------------------------
    ADMIN_BOOTSTRAP_EMAIL: Optional[str] = Field(default=None, description="Create/update this admin profile on startup")
    ADMIN_BOOTSTRAP_PASSWORD: Optional[str] = Field(default=None, description="Admin password used on startup bootstrap")

    # ----------------------------------
    # Machine ingestion (log shippers, agents)
    # ----------------------------------
    INGEST_API_KEY: Optional[str] = Field(
        default=None,
        description="Shared key accepted in X-Ingest-Key for log/ticket ingestion. Unset = open ingestion.",
    )

    # ----------------------------------
    # LLM for the ticket assistant (Vertex primary, Groq fallback)
    # ----------------------------------
    GCP_PROJECT_ID: str = Field(default="your-project-id", description="Google Cloud Project ID")
    GCP_LOCATION: str = Field(default="us-central1", description="GCP region for Vertex AI")
    GROQ_API_KEY: Optional[str] = Field(default=None, description="API Key for Groq Cloud (fallback)")
    VERTEX_LLM_MODEL: str = Field(
        default="gemini-2.5-flash",
        description="Vertex AI chat model name (primary).",
    )
    GROQ_FALLBACK_MODEL: str = Field(
        default="llama-3.3-70b-versatile",
        description="Groq chat model name (fallback).",
    )
    LLM_PROVIDERS: List[str] = Field(
        default=["vertex", "groq"],
        description="Providers tried in order until one answers. Known: vertex, groq.",
    )
    LLM_REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout (seconds) for LLM requests (Vertex/Groq).",
    )
    ASSISTANT_HISTORY_MESSAGES: int = Field(
        default=10,
        description="How many prior thread messages are given to the assistant as context.",
    )

    # ----------------------------------
    # Live logs
    # ----------------------------------
    LIVE_LOG_DEFAULT_LIMIT: int = 100
    LIVE_LOG_MAX_LIMIT: int = 1000
    CHANGE_FEED_QUEUE_SIZE: int = Field(default=256, description="Per-subscriber buffered events before it is dropped")

    # ----------------------------------
    # Remote agent control plane
    # ----------------------------------
    AGENT_CONTROL_PORT: int = 8754
    AGENT_CONTROL_PATH: str = "/control"
    AGENT_LOG_RECEIVER_URL: str = Field(
        default="http://localhost:8000/api/v1/logs",
        description="URL the agent forwards log lines to.",
    )
    AGENT_DEFAULT_LOG_FILE: str = "/var/log/syslog"
    AGENT_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # ----------------------------------
    # CORS
    # ----------------------------------
    CORS_ALLOW_ORIGINS: List[str] = Field(default=["*"])

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
