import os
from pydantic import BaseModel

class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CACHE_FRESHNESS_DAYS: int = int(os.getenv("CACHE_FRESHNESS_DAYS", "90"))
    AI_PAYLOAD_MAX_CHARS: int = int(os.getenv("AI_PAYLOAD_MAX_CHARS", "12000"))
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Property data
    PROPERTY_PROVIDER: str = os.getenv("PROPERTY_PROVIDER", "attom")   # attom | mock
    ATTOM_API_KEY: str | None = os.getenv("ATTOM_API_KEY")
    ATTOM_BASE_URL: str | None = os.getenv("ATTOM_BASE_URL")

    # Insights
    INSIGHTS_PROVIDER: str = os.getenv("INSIGHTS_PROVIDER", "openai")  # openai | mock
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.5"))

    # Store
    STORE_PROVIDER: str = os.getenv("STORE_PROVIDER", "supabase")      # supabase | memory
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Payments
    STRIPE_SECRET_KEY: str | None = os.getenv("STRIPE_SECRET_KEY")
    STRIPE_PRICE_ID: str | None = os.getenv("STRIPE_PRICE_ID")

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

    def required_credentials(self) -> dict[str, list[str]]:
        """
        Credentials each collaborator needs under the selected providers,
        grouped by collaborator name.
        """
        required: dict[str, list[str]] = {"payments": ["STRIPE_SECRET_KEY", "STRIPE_PRICE_ID"]}
        if self.PROPERTY_PROVIDER == "attom":
            required["property"] = ["ATTOM_API_KEY", "ATTOM_BASE_URL"]
        if self.INSIGHTS_PROVIDER == "openai":
            required["insights"] = ["OPENAI_API_KEY", "OPENAI_MODEL"]
        if self.STORE_PROVIDER == "supabase":
            required["store"] = ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"]
        return required

    def missing_credentials(self, collaborator: str | None = None) -> list[str]:
        groups = self.required_credentials()
        if collaborator is not None:
            groups = {collaborator: groups.get(collaborator, [])}
        return [
            name
            for names in groups.values()
            for name in names
            if not (getattr(self, name) or "").strip()
        ]

settings = Settings()
