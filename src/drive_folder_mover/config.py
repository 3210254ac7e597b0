"""
Runtime settings for the folder mover.

Settings come from three layers, later ones winning:
- Defaults defined here
- DRIVE_MOVER_* environment variables (see Settings.from_env)
- Command line flags (applied by cli.py)
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

DEFAULT_SCOPES = ["https://www.googleapis.com/auth/drive"]

# Drive v3 accepts up to 1000 items per list page
DEFAULT_PAGE_SIZE = 1000

# Drive v3 accepts up to 100 calls per batch request
DEFAULT_BATCH_SIZE = 100
MAX_BATCH_SIZE = 100

# Passed to googleapiclient, which backs off exponentially between attempts
DEFAULT_NUM_RETRIES = 3

ENV_PREFIX = "DRIVE_MOVER_"


@dataclass
class Settings:
    """
    Configuration shared by the client, the mover and the CLI.

    Attributes:
        credentials_file: Service account or authorized user JSON file
        access_token: Raw OAuth access token (used when no file is given)
        scopes: OAuth scopes requested for the credentials
        page_size: Items requested per list page
        batch_size: Sub-requests per batch HTTP request
        num_retries: Retries the HTTP layer performs on rate limits and 5xx
    """
    credentials_file: Optional[str] = None
    access_token: Optional[str] = None
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))
    page_size: int = DEFAULT_PAGE_SIZE
    batch_size: int = DEFAULT_BATCH_SIZE
    num_retries: int = DEFAULT_NUM_RETRIES

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_BATCH_SIZE}, "
                f"got {self.batch_size}"
            )
        if self.num_retries < 0:
            raise ValueError(f"num_retries must not be negative, got {self.num_retries}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from DRIVE_MOVER_* environment variables.

        Recognized variables: CREDENTIALS, ACCESS_TOKEN, SCOPES (comma
        separated), PAGE_SIZE, BATCH_SIZE, NUM_RETRIES.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        environ = os.environ if environ is None else environ
        values = {}

        credentials = environ.get(f"{ENV_PREFIX}CREDENTIALS")
        if credentials:
            values["credentials_file"] = credentials

        token = environ.get(f"{ENV_PREFIX}ACCESS_TOKEN")
        if token:
            values["access_token"] = token

        scopes = environ.get(f"{ENV_PREFIX}SCOPES")
        if scopes:
            values["scopes"] = [s.strip() for s in scopes.split(",") if s.strip()]

        for key in ("page_size", "batch_size", "num_retries"):
            raw = environ.get(f"{ENV_PREFIX}{key.upper()}")
            if raw:
                try:
                    values[key] = int(raw)
                except ValueError as e:
                    raise ValueError(
                        f"{ENV_PREFIX}{key.upper()} must be an integer, got '{raw}'"
                    ) from e

        if values:
            logger.debug(f"Settings from environment: {sorted(values)}")
        return cls(**values)

    def merged(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
