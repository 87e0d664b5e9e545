"""
Configuration for Doc Enhancer.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "openai"  # openai, ollama
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    api_key: str | None = None
    max_tokens: int = 8000
    timeout: float = 120.0

    # Rewriting tolerates a little more variation than extraction
    enhance_temperature: float = 0.3
    analyze_temperature: float = 0.2
    conversion_temperature: float = 0.2


class ConfluenceConfig(BaseModel):
    """Wiki (Confluence) API credentials."""

    email: str | None = None
    token: str | None = None
    timeout: float = 30.0


class StorageConfig(BaseModel):
    """Key-value document store configuration."""

    backend: str = "sqlite"  # sqlite, memory
    db_path: str = "data/docenhancer.db"
    key_prefix: str = "doc-enhancer"


class EnhancementConfig(BaseModel):
    """Context-aware enhancement configuration."""

    max_context_tokens: int = 100_000
    max_key_terms: int = 10
    max_common_patterns: int = 3
    # False keeps first-occurrence replacement; True refuses ambiguous matches
    require_unique_match: bool = False


class PdfConfig(BaseModel):
    """PDF import configuration."""

    jpeg_quality: int = Field(default=80, ge=1, le=95)
    max_file_bytes: int = 20 * 1024 * 1024


class TokenizerConfig(BaseModel):
    """Tokenizer configuration for context budgeting."""

    provider: str = "tiktoken"  # tiktoken, approximate
    model: str = "cl100k_base"
    chars_per_token: float = 4.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    confluence: ConfluenceConfig = Field(default_factory=ConfluenceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    enhancement: EnhancementConfig = Field(default_factory=EnhancementConfig)
    pdf: PdfConfig = Field(default_factory=PdfConfig)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            DOCENH_LLM_PROVIDER: LLM provider (openai, ollama)
            DOCENH_LLM_MODEL: LLM model name
            DOCENH_LLM_BASE_URL: LLM base URL (OpenAI-compatible endpoint or Ollama host)
            DOCENH_LLM_API_KEY: LLM API key (for OpenAI)
            DOCENH_CONFLUENCE_EMAIL: Confluence account email
            DOCENH_CONFLUENCE_TOKEN: Confluence API token
            DOCENH_STORAGE_BACKEND: Storage backend (sqlite, memory)
            DOCENH_STORAGE_DB_PATH: SQLite database path
            DOCENH_REQUIRE_UNIQUE_MATCH: Refuse ambiguous replacements
            DOCENH_LOG_LEVEL: Log level
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            if value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        cors = get_env("DOCENH_CORS_ORIGINS")

        return cls(
            llm=LLMConfig(
                provider=get_env("DOCENH_LLM_PROVIDER", "openai"),
                model=get_env("DOCENH_LLM_MODEL", "gpt-4o-mini"),
                base_url=get_env("DOCENH_LLM_BASE_URL"),
                api_key=get_env("DOCENH_LLM_API_KEY"),
                max_tokens=get_env("DOCENH_LLM_MAX_TOKENS", 8000),
                timeout=get_env("DOCENH_LLM_TIMEOUT", 120.0),
                enhance_temperature=get_env("DOCENH_ENHANCE_TEMPERATURE", 0.3),
                analyze_temperature=get_env("DOCENH_ANALYZE_TEMPERATURE", 0.2),
                conversion_temperature=get_env("DOCENH_CONVERSION_TEMPERATURE", 0.2),
            ),
            confluence=ConfluenceConfig(
                email=get_env("DOCENH_CONFLUENCE_EMAIL"),
                token=get_env("DOCENH_CONFLUENCE_TOKEN"),
                timeout=get_env("DOCENH_CONFLUENCE_TIMEOUT", 30.0),
            ),
            storage=StorageConfig(
                backend=get_env("DOCENH_STORAGE_BACKEND", "sqlite"),
                db_path=get_env("DOCENH_STORAGE_DB_PATH", "data/docenhancer.db"),
                key_prefix=get_env("DOCENH_STORAGE_KEY_PREFIX", "doc-enhancer"),
            ),
            enhancement=EnhancementConfig(
                max_context_tokens=get_env("DOCENH_MAX_CONTEXT_TOKENS", 100_000),
                require_unique_match=get_env("DOCENH_REQUIRE_UNIQUE_MATCH", False),
            ),
            pdf=PdfConfig(
                jpeg_quality=get_env("DOCENH_PDF_JPEG_QUALITY", 80),
                max_file_bytes=get_env("DOCENH_PDF_MAX_FILE_BYTES", 20 * 1024 * 1024),
            ),
            tokenizer=TokenizerConfig(
                provider=get_env("DOCENH_TOKENIZER_PROVIDER", "tiktoken"),
                model=get_env("DOCENH_TOKENIZER_MODEL", "cl100k_base"),
            ),
            logging=LoggingConfig(
                level=get_env("DOCENH_LOG_LEVEL", "INFO"),
                log_to_file=get_env("DOCENH_LOG_TO_FILE", False),
                log_dir=get_env("DOCENH_LOG_DIR", "logs"),
                file_rotation=get_env("DOCENH_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("DOCENH_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("DOCENH_LOG_COMPRESSION", "zip"),
                serialize=get_env("DOCENH_LOG_SERIALIZE", True),
            ),
            server=ServerConfig(
                host=get_env("DOCENH_HOST", "0.0.0.0"),
                port=get_env("DOCENH_PORT", 8000),
                cors_origins=[o.strip() for o in cors.split(",")] if cors else ["*"],
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        # Env sections that differ from defaults override YAML
        default = cls()
        final_dict = {**config_dict}
        for section in cls.model_fields:
            env_value = getattr(env_config, section)
            if env_value != getattr(default, section):
                final_dict[section] = env_value.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
