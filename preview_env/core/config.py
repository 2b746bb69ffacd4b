import json
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from preview_env.core.exceptions import ConfigurationError

DEFAULT_MAX_TIMEOUT_MS = 600000
DEFAULT_TOKEN_NAME_TEMPLATE = "preview-{environment}"


class Settings(BaseSettings):
    # Railway API
    RAILWAY_API_TOKEN: str
    RAILWAY_API_ENDPOINT: str = "https://backboard.railway.app/graphql/v2"
    PROJECT_ID: str

    # Source environment (one of name or id is required when cloning)
    SRC_ENVIRONMENT_NAME: Optional[str] = None
    SRC_ENVIRONMENT_ID: Optional[str] = None

    # Destination environment
    DEST_ENV_NAME: str

    # JSON object of variables upserted into every service instance
    ENV_VARS: Optional[str] = None

    # JSON array of service names that are not redeployed
    IGNORE_SERVICE_REDEPLOY: Optional[str] = None

    # Service whose first domain is published as the service_domain output
    API_SERVICE_NAME: Optional[str] = None

    # Branch the deployment triggers are rebound to
    BRANCH_NAME: str

    # Deployment monitor
    MAX_TIMEOUT: int = DEFAULT_MAX_TIMEOUT_MS  # Milliseconds
    POLL_INTERVAL_SECONDS: float = 20.0
    INITIAL_SETTLE_SECONDS: float = (
        15.0  # Wait after cloning before the first status read
    )

    # Project token
    TOKEN_NAME_TEMPLATE: str = DEFAULT_TOKEN_NAME_TEMPLATE

    # Behaviour switches
    REQUIRE_SERVICE_DOMAIN: bool = False
    FAIL_ON_PARTIAL_BATCH: bool = False

    # HTTP Settings
    HTTP_REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json|text
    LOGGING_FRAME_DEPTH: int = (
        6  # Frame depth for finding logging call origin in stack trace
    )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
        frozen = True

    @field_validator("MAX_TIMEOUT", mode="before")
    @classmethod
    def _parse_max_timeout(cls, value):
        """Blank or non-numeric timeouts fall back to the default."""
        if value is None:
            return DEFAULT_MAX_TIMEOUT_MS
        try:
            return int(str(value).strip())
        except ValueError:
            return DEFAULT_MAX_TIMEOUT_MS

    @field_validator(
        "SRC_ENVIRONMENT_NAME",
        "SRC_ENVIRONMENT_ID",
        "ENV_VARS",
        "IGNORE_SERVICE_REDEPLOY",
        "API_SERVICE_NAME",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        # Unset action inputs arrive as empty strings
        if isinstance(value, str) and not value.strip():
            return None
        return value

    # --------- Properties ---------
    @property
    def max_timeout_seconds(self) -> float:
        return self.MAX_TIMEOUT / 1000.0

    @property
    def ignored_services(self) -> List[str]:
        """
        Parse IGNORE_SERVICE_REDEPLOY into a list of service names.

        Raises:
            ConfigurationError: If the value is not a JSON array of strings
        """
        if not self.IGNORE_SERVICE_REDEPLOY:
            return []
        try:
            names = json.loads(self.IGNORE_SERVICE_REDEPLOY)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"IGNORE_SERVICE_REDEPLOY is not valid JSON: {e}"
            ) from e
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ConfigurationError(
                "IGNORE_SERVICE_REDEPLOY must be a JSON array of service names"
            )
        return names

    def token_name_for(self, environment_name: str) -> str:
        return self.TOKEN_NAME_TEMPLATE.format(environment=environment_name)
