from __future__ import annotations

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SUMMARY_FAILURE_MODES = ("embed", "error")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    LOG_LEVEL: str = Field(default="INFO")  # INFO|DEBUG
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)

    # Slack
    SLACK_WEBHOOK_URL: str = Field(default="")

    # LLM (OpenAI chat completions)
    OPENAI_API_KEY: str = Field(default="")
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo")
    OPENAI_API_URL: str = Field(default="https://api.openai.com/v1/chat/completions")

    # Inbound webhook authentication
    WEBHOOK_SECRET: str = Field(default="")
    REQUIRE_SIGNATURE: bool = Field(default=False)
    SIGNATURE_HEADER: str = Field(default="X-Signature")

    # What to do when the LLM call fails:
    #   embed - put "Analysis failed: <reason>" in the Slack message and keep going
    #   error - stop and answer 500 without notifying Slack
    SUMMARY_FAILURE_MODE: str = Field(default="embed")

    # Applies to both outbound calls (LLM and Slack)
    OUTBOUND_TIMEOUT_SECONDS: float = Field(default=30.0)

    def signature_headers(self) -> list[str]:
        """Header names checked for the inbound signature, in priority order."""
        names = [self.SIGNATURE_HEADER] if self.SIGNATURE_HEADER else []
        if "x-hub-signature-256" not in {n.lower() for n in names}:
            names.append("X-Hub-Signature-256")
        return names

    def validate_configuration(self) -> list[str]:
        """
        Validates settings and returns list of warnings/errors.
        Critical errors should prevent startup.
        """
        errors = []
        warnings = []

        # Critical: signature policy needs a secret to check against
        if self.REQUIRE_SIGNATURE and not self.WEBHOOK_SECRET:
            errors.append("WEBHOOK_SECRET is required when REQUIRE_SIGNATURE=true")

        if self.SUMMARY_FAILURE_MODE not in SUMMARY_FAILURE_MODES:
            errors.append(
                f"SUMMARY_FAILURE_MODE must be one of: {', '.join(SUMMARY_FAILURE_MODES)} "
                f"(got: {self.SUMMARY_FAILURE_MODE})"
            )

        if self.OUTBOUND_TIMEOUT_SECONDS <= 0:
            errors.append(f"OUTBOUND_TIMEOUT_SECONDS must be positive (got: {self.OUTBOUND_TIMEOUT_SECONDS})")

        if not self.WEBHOOK_SECRET:
            warnings.append("WEBHOOK_SECRET not set - inbound webhooks will not be authenticated")
        if not self.OPENAI_API_KEY:
            warnings.append("OPENAI_API_KEY not set - meeting analysis will fail")
        if not self.SLACK_WEBHOOK_URL:
            warnings.append("SLACK_WEBHOOK_URL not set - notifications will not be delivered")

        all_messages = []
        if errors:
            all_messages.extend([f"ERROR: {e}" for e in errors])
        if warnings:
            all_messages.extend([f"WARNING: {w}" for w in warnings])

        return all_messages

    def validate_and_fail_fast(self) -> None:
        """
        Validates configuration and exits if critical errors found.
        Logs warnings but continues.
        """
        messages = self.validate_configuration()

        errors = [msg for msg in messages if msg.startswith("ERROR:")]
        warnings = [msg for msg in messages if msg.startswith("WARNING:")]

        if warnings:
            logger.warning("Configuration warnings detected:")
            for warning in warnings:
                logger.warning("  %s", warning)

        if errors:
            logger.error("Critical configuration errors detected:")
            for error in errors:
                logger.error("  %s", error)
            logger.error("Application cannot start. Please fix configuration errors above.")
            sys.exit(1)

        logger.info(
            "Configuration validation passed. require_signature=%s summary_failure_mode=%s",
            self.REQUIRE_SIGNATURE,
            self.SUMMARY_FAILURE_MODE,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
