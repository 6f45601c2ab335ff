"""JSON file storage implementation for the upstream credential."""

import contextlib
import json
from pathlib import Path

from pydantic import ValidationError

from clinicrelay.auth.exceptions import (
    CredentialsInvalidError,
    CredentialsStorageError,
)
from clinicrelay.auth.models import Credential
from clinicrelay.auth.storage.base import TokenStorage
from clinicrelay.core.logging import get_logger


logger = get_logger(__name__)


class JsonFileTokenStorage(TokenStorage):
    """JSON file storage so the relay survives restarts without re-bootstrapping."""

    def __init__(self, file_path: Path):
        """Initialize JSON file storage.

        Args:
            file_path: Path to the JSON credentials file
        """
        self.file_path = Path(file_path).expanduser()

    async def load(self) -> Credential | None:
        """Load the credential from the JSON file.

        Returns:
            Parsed credential if the file exists, None otherwise

        Raises:
            CredentialsInvalidError: If the file content is not a valid credential
            CredentialsStorageError: If the file cannot be read
        """
        if not await self.exists():
            logger.debug("credentials_file_not_found", path=str(self.file_path))
            return None

        try:
            with self.file_path.open(encoding="utf-8") as f:
                data = json.load(f)
            credential = Credential.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            raise CredentialsInvalidError(
                f"Failed to parse credentials file {self.file_path}: {e}"
            ) from e
        except OSError as e:
            raise CredentialsStorageError(
                f"Error loading credentials from {self.file_path}: {e}"
            ) from e

        logger.debug(
            "credentials_loaded",
            path=str(self.file_path),
            expires_at=str(credential.expires_at_datetime),
            has_refresh_token=credential.refresh_token is not None,
        )
        return credential

    async def save(self, credential: Credential) -> bool:
        """Save the credential to the JSON file.

        Args:
            credential: Credential to save

        Returns:
            True if saved successfully

        Raises:
            CredentialsStorageError: If there's an error writing the file
        """
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

            data = credential.model_dump(by_alias=True)

            # Use atomic write: write to temp file then rename
            temp_path = self.file_path.with_suffix(".tmp")

            try:
                with temp_path.open("w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)

                # Read/write for owner only
                temp_path.chmod(0o600)

                Path.replace(temp_path, self.file_path)

                logger.debug("credentials_saved", path=str(self.file_path))
                return True
            except Exception:
                if temp_path.exists():
                    with contextlib.suppress(OSError):
                        temp_path.unlink()
                raise

        except Exception as e:
            raise CredentialsStorageError(f"Error saving credentials: {e}") from e

    async def exists(self) -> bool:
        return self.file_path.exists() and self.file_path.is_file()

    async def delete(self) -> bool:
        """Delete the credentials file.

        Returns:
            True if a file was deleted, False if none existed

        Raises:
            CredentialsStorageError: If there's an error deleting the file
        """
        try:
            if await self.exists():
                self.file_path.unlink()
                logger.debug("credentials_deleted", path=str(self.file_path))
                return True
            return False
        except OSError as e:
            raise CredentialsStorageError(f"Error deleting credentials: {e}") from e

    def get_location(self) -> str:
        return str(self.file_path)
