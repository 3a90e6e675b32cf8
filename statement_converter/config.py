"""Configuration management for Statement Converter."""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from statement_converter.models import NoMatchPolicy, ParseOptions, ParseStrategy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Parser configuration
    parse_strategy: ParseStrategy = ParseStrategy.LOOKAHEAD
    on_no_matches: NoMatchPolicy = NoMatchPolicy.RETURN_EMPTY
    max_records: int = 50
    lookahead_lines: int = 2  # Lines after the dated line searched for an amount

    # Upload limits
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    pdf_extraction_timeout: float = 25.0  # Seconds

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # PARSE_STRATEGY and parse_strategy both work
        extra="ignore",  # Ignore extra environment variables
    )

    def parse_options(self) -> ParseOptions:
        """Build the default parse options from the loaded settings."""
        return ParseOptions(
            strategy=self.parse_strategy,
            on_no_matches=self.on_no_matches,
            max_records=self.max_records,
            lookahead_lines=self.lookahead_lines,
        )

    def configure_logging(self) -> None:
        """Apply the configured log level to the root logger."""
        logging.basicConfig(
            level=self.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    def log_config(self) -> None:
        """Print current configuration."""
        import os

        print("\n" + "=" * 60)
        print("📋 CONFIGURATION LOADED")
        print("=" * 60)

        env_file_path = os.path.join(os.getcwd(), ".env")
        print(f"Working Directory:   {os.getcwd()}")
        print(f".env file exists:    {os.path.exists(env_file_path)}")
        print("-" * 60)

        print(f"Parse Strategy:      {self.parse_strategy.value}")
        print(f"On No Matches:       {self.on_no_matches.value}")
        print(f"Max Records:         {self.max_records}")
        print(f"Lookahead Lines:     {self.lookahead_lines}")
        print(f"Max Upload Size:     {self.max_upload_bytes // (1024 * 1024)}MB")
        print(f"PDF Timeout:         {self.pdf_extraction_timeout}s")
        print(f"CORS Origins:        {', '.join(self.cors_origins)}")
        print(f"Log Level:           {self.log_level}")
        print(f"API Host:            {self.api_host}:{self.api_port}")
        print("=" * 60 + "\n")


# Global settings instance
settings = Settings()
