"""
cli-profile: store temporary cloud credentials as AWS CLI profiles.

Resolves the profile name for an account (explicit name, then account alias,
then account name) and writes the account's temporary credentials into that
section of the AWS shared credentials file, leaving other profiles untouched.

Key features:
- Profile naming with override > alias > account name precedence
- Safe in-place update of ~/.aws/credentials (0600 permissions)
- Temporary credentials via STS GetSessionToken or AssumeRole
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .core import (
    CliProfileError,
    CredentialFetchError,
    CredentialWriteError,
    dumps_credentials,
    get_account,
    get_aws_credentials_path,
    get_session_credentials,
    list_profiles,
    loads_credentials,
    new_cloud_cli_entry,
    new_credentials_document,
    read_aws_credentials,
    resolve_profile_name,
    save_credential_entry,
    update_profile_credentials,
    write_aws_credentials,
)
from .models import Account, CloudCliEntry, CloudCredentials

__all__ = [
    # Data model
    "Account",
    "CloudCredentials",
    "CloudCliEntry",
    # Profile naming
    "resolve_profile_name",
    "new_cloud_cli_entry",
    # Credentials document
    "new_credentials_document",
    "save_credential_entry",
    "dumps_credentials",
    "loads_credentials",
    # File operations
    "get_aws_credentials_path",
    "read_aws_credentials",
    "write_aws_credentials",
    "update_profile_credentials",
    "list_profiles",
    # AWS lookups
    "get_account",
    "get_session_credentials",
    # Errors
    "CliProfileError",
    "CredentialWriteError",
    "CredentialFetchError",
]
