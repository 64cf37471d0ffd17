# docgraph/settings.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Literal
from dotenv import load_dotenv


# ─────────────────────────────────────────────────────────────
# Small helpers to parse environment variables robustly
# ─────────────────────────────────────────────────────────────

def _strip_quotes(val: Optional[str]) -> Optional[str]:
    """
    Removes surrounding quotes from environment variable values.

    Args:
        val (Optional[str]): The value to process.

    Returns:
        Optional[str]: The value with quotes stripped, or None if input was None.
    """
    if val is None:
        return None
    v = val.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        return v[1:-1]
    return v

def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Reads a string environment variable with quote stripping.

    Args:
        key (str): The environment variable name.
        default (Optional[str], optional): Default value if not found. Defaults to None.

    Returns:
        Optional[str]: The environment variable value or default.
    """
    val = os.getenv(key)
    return _strip_quotes(val) if val is not None else default

def env_int(key: str, default: int) -> int:
    """
    Reads an integer environment variable with fallback to default.

    Args:
        key (str): The environment variable name.
        default (int): Default value if not found or invalid.

    Returns:
        int: The parsed integer value or default.
    """
    val = env_str(key)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError:
        return default

def env_float(key: str, default: float) -> float:
    """
    Reads a float environment variable with fallback to default.

    Args:
        key (str): The environment variable name.
        default (float): Default value if not found or invalid.

    Returns:
        float: The parsed float value or default.
    """
    val = env_str(key)
    if val is None or val == "":
        return default
    try:
        return float(val)
    except ValueError:
        return default

def env_bool(key: str, default: bool) -> bool:
    """
    Reads a boolean environment variable with fallback to default.

    Args:
        key (str): The environment variable name.
        default (bool): Default value if not found.

    Returns:
        bool: True if value is in {"1", "true", "yes", "y", "t"}, otherwise default.
    """
    val = env_str(key)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "t"}

def env_list(key: str, default_csv: str, sep: str = ",") -> List[str]:
    """
    Reads a delimited list environment variable.

    Args:
        key (str): The environment variable name.
        default_csv (str): Default comma-separated value string.
        sep (str, optional): Delimiter character. Defaults to ",".

    Returns:
        List[str]: List of trimmed non-empty values.
    """
    raw = env_str(key, default_csv) or ""
    return [x.strip() for x in raw.split(sep) if x.strip()]


# Keys shipped in sample .env files; never worth a network round trip.
_PLACEHOLDER_MARKERS = ("your", "placeholder", "changeme", "xxx", "dummy")

def is_placeholder_key(key: Optional[str]) -> bool:
    """
    Tells whether an API key is missing or obviously a template value.

    Args:
        key (Optional[str]): The configured key.

    Returns:
        bool: True when the key cannot be used for a real call.
    """
    if not key or not key.strip():
        return True
    low = key.strip().lower()
    return any(marker in low for marker in _PLACEHOLDER_MARKERS)


# ─────────────────────────────────────────────────────────────
# Settings sections
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProviderSettings:
    """
    Provider selection + credentials.
    Choose provider via: LLM_PROVIDER = "openai" or "azure"
    """
    provider: Literal["openai", "azure"] = "openai"

    # OpenAI (direct)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None         # optional (for proxies / compatible servers)
    openai_llm_model: str = "gpt-4o-mini"

    # Azure OpenAI
    azure_api_key: Optional[str] = None
    azure_endpoint: Optional[str] = None
    azure_api_version: str = "2024-02-15-preview"
    azure_llm_deployment: Optional[str] = None

    def llm_available(self) -> bool:
        """True when the selected provider has a usable key (and endpoint for Azure)."""
        if self.provider == "azure":
            return not is_placeholder_key(self.azure_api_key) and bool(self.azure_endpoint) \
                and bool(self.azure_llm_deployment)
        return not is_placeholder_key(self.openai_api_key)


@dataclass(frozen=True)
class ChatGenerationSettings:
    """
    Default knobs for chat completions used across the app.
    """
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout: float = 60.0  # seconds per request

@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Page analysis knobs.
    context_chars: how much of the whole document is handed to the prompt
    max_page_tokens: page text is trimmed to this many tokens before prompting
    """
    use_llm: bool = True
    context_chars: int = 1500
    max_page_tokens: int = 1500
    tiktoken_model: str = "gpt-4o-mini"  # for token counting

@dataclass(frozen=True)
class LayoutSettings:
    """
    Ring radii and z spacing for the radial layout.
    Document profiles may override the radii per upload.
    """
    page_radius: float = 600.0
    keyword_radius: float = 1000.0
    insight_radius: float = 1200.0
    entity_radius: float = 400.0
    page_z_step: float = 40.0
    keyword_z_base: float = 200.0
    keyword_z_step: float = 40.0
    insight_z_base: float = 160.0
    insight_z_step: float = 50.0
    entity_z_base: float = 100.0
    entity_z_step: float = 20.0

@dataclass(frozen=True)
class ServerSettings:
    """
    HTTP server and logging settings.
    """
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_file: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class Settings:
    """
    Full application settings bundle.
    """
    provider: ProviderSettings
    chat: ChatGenerationSettings
    analyzer: AnalyzerSettings
    layout: LayoutSettings
    server: ServerSettings


# ─────────────────────────────────────────────────────────────
# Loader / validator
# ─────────────────────────────────────────────────────────────

def load_settings() -> Settings:
    """
    Loads and validates all application settings from environment variables.

    Reads from .env file, parses configuration for provider, chat, page analysis,
    layout and server. A missing API key is allowed: the page analyzer then runs
    its heuristic path only.

    Returns:
        Settings: A fully configured Settings object.

    Raises:
        RuntimeError: If LLM_PROVIDER names an unknown provider.
    """
    load_dotenv()  # called once at startup

    # Provider selection
    provider_name = (env_str("LLM_PROVIDER", "openai") or "openai").strip().lower()
    if provider_name not in {"openai", "azure"}:
        raise RuntimeError("LLM_PROVIDER must be 'openai' or 'azure'.")

    provider = ProviderSettings(
        provider=provider_name,  # type: ignore[arg-type]
        # OpenAI
        openai_api_key=env_str("OPENAI_API_KEY"),
        openai_base_url=env_str("OPENAI_BASE_URL"),
        openai_llm_model=env_str("OPENAI_LLM_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
        # Azure
        azure_api_key=env_str("AZURE_OPENAI_API_KEY"),
        azure_endpoint=env_str("AZURE_OPENAI_ENDPOINT"),
        azure_api_version=env_str("AZURE_OPENAI_API_VERSION", "2024-02-15-preview") or "2024-02-15-preview",
        azure_llm_deployment=env_str("AZURE_OPENAI_LLM_DEPLOYMENT_NAME"),
    )

    chat = ChatGenerationSettings(
        temperature=env_float("CHAT_TEMPERATURE", 0.0),
        max_tokens=env_int("CHAT_MAX_TOKENS", 1024),
        timeout=env_float("CHAT_TIMEOUT", 60.0),
    )

    analyzer = AnalyzerSettings(
        use_llm=env_bool("ANALYZER_USE_LLM", True),
        context_chars=env_int("ANALYZER_CONTEXT_CHARS", 1500),
        max_page_tokens=env_int("ANALYZER_MAX_PAGE_TOKENS", 1500),
        tiktoken_model=env_str("ANALYZER_TIKTOKEN_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    )

    layout = LayoutSettings(
        page_radius=env_float("LAYOUT_PAGE_RADIUS", 600.0),
        keyword_radius=env_float("LAYOUT_KEYWORD_RADIUS", 1000.0),
        insight_radius=env_float("LAYOUT_INSIGHT_RADIUS", 1200.0),
        entity_radius=env_float("LAYOUT_ENTITY_RADIUS", 400.0),
    )

    server = ServerSettings(
        host=env_str("HOST", "0.0.0.0") or "0.0.0.0",
        port=env_int("PORT", 3000),
        log_level=(env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
        log_file=env_str("LOG_FILE"),
        cors_origins=env_list("CORS_ORIGINS", "*"),
    )

    return Settings(
        provider=provider,
        chat=chat,
        analyzer=analyzer,
        layout=layout,
        server=server,
    )


# Optional: convenience singleton (handlers receive the store and chat by injection)
settings = load_settings()
