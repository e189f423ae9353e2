"""
Configuration management for the Financials Comparison Tool.
"""
import logging
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Provider identities and display labels
    PROVIDER_LABELS = {
        "openai": "OpenAI",
        "deepseek": "DeepSeek",
        "gemini": "Google Gemini",
        "claude": "Anthropic Claude",
    }

    # Selectable models per provider as (value, label) pairs
    MODEL_OPTIONS = {
        "gemini": [
            ("gemini-2.0-flash", "Gemini 2.0 Flash"),
            ("gemini-1.5-pro", "Gemini 1.5 Pro"),
            ("gemini-pro", "Gemini Pro"),
        ],
        "openai": [
            ("gpt-3.5-turbo", "GPT-3.5 Turbo"),
            ("gpt-4", "GPT-4"),
            ("gpt-4-turbo-preview", "GPT-4 Turbo"),
            ("gpt-4o", "GPT-4o"),
            ("gpt-4o-mini", "GPT-4o Mini"),
            ("o1-mini", "o1 Mini"),
            ("o3-mini", "o3 Mini"),
        ],
        "deepseek": [
            ("deepseek-chat", "DeepSeek Chat"),
            ("deepseek-coder", "DeepSeek Coder"),
        ],
        "claude": [
            ("claude-3-opus-20240229", "Claude 3 Opus"),
            ("claude-3-sonnet-20240229", "Claude 3 Sonnet"),
            ("claude-2.1", "Claude 2.1"),
        ],
    }

    # Credentials, one environment variable per provider
    API_KEY_ENV_VARS = {
        "openai": "OPENAI_API_KEY",
        "deepseek": "DEEPSEEK_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "claude": "ANTHROPIC_API_KEY",
    }

    # Endpoints
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL")
    DEEPSEEK_BASE_URL = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
    GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    ANTHROPIC_BASE_URL = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    ANTHROPIC_VERSION = "2023-06-01"

    # Default selection
    DEFAULT_PROVIDER = os.getenv("COMPARISON_PROVIDER", "gemini")
    DEFAULT_MODEL = os.getenv("COMPARISON_MODEL", "gemini-1.5-pro")

    # Request settings
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("LLM_REQUEST_TIMEOUT", "120"))
    CLAUDE_MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "4096"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Upload hint (20 MB); uploads are read whole and never rejected on size
    MAX_FILE_SIZE_MB = 20

    # Supported file types
    SUPPORTED_CSV_TYPES = [".csv"]

    # Downloads
    OUTPUT_FILENAME = "processed-comparison.csv"
    OUTPUT_MIME_TYPE = "text/csv"
    EXCEL_FILENAME = "processed-comparison.xlsx"
    EXCEL_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    @classmethod
    def providers(cls) -> list[str]:
        """Provider identities in display order."""
        return list(cls.PROVIDER_LABELS)

    @classmethod
    def models_for(cls, provider: str) -> list[str]:
        return [value for value, _ in cls.MODEL_OPTIONS.get(provider, [])]

    @classmethod
    def model_label(cls, provider: str, model: str) -> str:
        for value, label in cls.MODEL_OPTIONS.get(provider, []):
            if value == model:
                return label
        return model

    @classmethod
    def default_model_for(cls, provider: str) -> str:
        """First listed model of a provider; the model selector resets to it on provider change."""
        models = cls.models_for(provider)
        return models[0] if models else ""

    @classmethod
    def get_api_key(cls, provider: str) -> str:
        """Credential for a provider from the environment, or an empty string."""
        env_var = cls.API_KEY_ENV_VARS.get(provider)
        if not env_var:
            return ""
        return os.getenv(env_var, "")

    @classmethod
    def prefill_api_key(cls, provider: str, current: str = "") -> str:
        """Keep a key the user already typed; otherwise fall back to the provider's env var."""
        return current or cls.get_api_key(provider)

    @classmethod
    def validate_selection(cls, provider: str, model: str) -> tuple[bool, str]:
        """Validate that a provider/model pair is one of the configured options."""
        if provider not in cls.MODEL_OPTIONS:
            return False, f"Unknown provider: {provider}"
        if model not in cls.models_for(provider):
            return False, f"Unknown model for {cls.PROVIDER_LABELS[provider]}: {model}"
        return True, "Selection valid"


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(
        level=(level or Config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
