"""Per-device credentials provisioned as files in a secret directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

USERNAME_PASSWORD = "username-password"


@dataclass(slots=True)
class Credential:
    """Resolved credential; ``fields`` always holds username and may hold password."""

    credential_type: str = USERNAME_PASSWORD
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def username(self) -> str:
        return self.fields.get("username", "")

    @property
    def password(self) -> str | None:
        return self.fields.get("password")


class CredentialResolver:
    """
    Reads ``<key>_username`` and ``<key>_password`` from ``directory``.

    The key is the device id with ``-`` replaced by ``_``. File contents are
    used verbatim. All file I/O is blocking; async callers should go through
    ``asyncio.to_thread``.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory).expanduser() if directory else None

    @staticmethod
    def secret_key(device_id: str) -> str:
        return device_id.replace("-", "_")

    def resolve(self, device_id: str) -> Credential | None:
        if self.directory is None:
            logger.debug("credential directory not configured")
            return None
        key = self.secret_key(device_id)
        username = self._read(self.directory / f"{key}_username")
        if not username:
            logger.info(f"no username provisioned for device {device_id}")
            return None

        fields = {"username": username}
        password = self._read(self.directory / f"{key}_password")
        if password is not None:
            fields["password"] = password
        return Credential(USERNAME_PASSWORD, fields)

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"cannot read secret file {path.name}: {e}")
            return None
