"""
Credential loading for the Google Drive client.

Credentials are always built explicitly and handed to the client at
construction. Supported sources:
- A service account key file ("type": "service_account")
- An authorized user file written by an OAuth installed-app flow
- A raw OAuth access token
"""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials

from .errors import InvalidInputError

logger = logging.getLogger(__name__)


def load_credentials(
    credentials_file: Optional[Union[str, Path]] = None,
    scopes: Sequence[str] = (),
    access_token: Optional[str] = None
):
    """
    Load Google credentials from a file or a raw access token.

    Args:
        credentials_file: Path to a service account or authorized user JSON file
        scopes: OAuth scopes to request
        access_token: Bearer token used when no file is given

    Returns:
        A google.auth credentials object

    Raises:
        FileNotFoundError: If credentials_file does not exist
        InvalidInputError: If neither source is given or the file is malformed
    """
    if credentials_file is None:
        if not access_token:
            raise InvalidInputError(
                "Either a credentials file or an access token is required"
            )
        logger.debug("Using raw access token")
        return Credentials(token=access_token)

    path = Path(credentials_file)
    if not path.is_file():
        raise FileNotFoundError(f"Credentials file not found: {path}")

    try:
        info = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise InvalidInputError(f"Cannot read credentials file {path}: {e}") from e

    if info.get("type") == "service_account":
        logger.info(f"Using service account {info.get('client_email', '?')}")
        return service_account.Credentials.from_service_account_info(
            info, scopes=list(scopes)
        )

    try:
        creds = Credentials.from_authorized_user_info(info, list(scopes))
    except ValueError as e:
        raise InvalidInputError(f"Unsupported credentials file {path}: {e}") from e

    if not creds.valid and creds.refresh_token:
        logger.info("Refreshing expired user credentials")
        creds.refresh(Request())
        path.write_text(creds.to_json(), encoding="utf-8")

    return creds
