"""
Value types shared by the profile resolver and the credentials writer.
"""

from dataclasses import dataclass
from typing import Optional


def mask_secret(value):
    """Show only the first 10 characters of a secret value."""
    if not value:
        return ""
    return f"{value[:10]}***"


@dataclass(frozen=True)
class Account:
    """
    A cloud account as reported by the authentication side.

    Attributes:
        id: Opaque account identifier
        name: Human-readable account name
        alias: Optional display name overriding ``name`` ("" means unset)
    """

    id: str
    name: str
    alias: str = ""


@dataclass(frozen=True)
class CloudCredentials:
    """Temporary credentials for an account. All fields are secrets."""

    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: Optional[str] = None

    @classmethod
    def from_sts(cls, credentials):
        """
        Build credentials from an STS ``Credentials`` response mapping.

        Args:
            credentials: Dict with AccessKeyId, SecretAccessKey, SessionToken
                and optionally Expiration

        Returns:
            CloudCredentials
        """
        expiration = credentials.get("Expiration")
        if expiration is not None and hasattr(expiration, "isoformat"):
            expiration = expiration.isoformat()
        elif expiration is not None:
            expiration = str(expiration)

        return cls(
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretAccessKey"],
            session_token=credentials["SessionToken"],
            expiration=expiration,
        )

    def __repr__(self):
        return (
            f"CloudCredentials(access_key_id={mask_secret(self.access_key_id)!r}, "
            f"expiration={self.expiration!r})"
        )


@dataclass(frozen=True)
class CloudCliEntry:
    """One profile section to persist in the credentials file."""

    profile_name: str
    key_id: str
    key: str
    token: str
    expiration: Optional[str] = None

    def __repr__(self):
        return (
            f"CloudCliEntry(profile_name={self.profile_name!r}, "
            f"key_id={mask_secret(self.key_id)!r}, expiration={self.expiration!r})"
        )
