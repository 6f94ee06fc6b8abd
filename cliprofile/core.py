"""
Core profile naming and credential file functions for cli-profile.
"""

import configparser
import io
import os
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import Account, CloudCliEntry, CloudCredentials

# Keys written into every profile section, in file order
ACCESS_KEY_ID_KEY = "aws_access_key_id"
SECRET_ACCESS_KEY_KEY = "aws_secret_access_key"
SESSION_TOKEN_KEY = "aws_session_token"
EXPIRATION_KEY = "expiration"

DEFAULT_SESSION_NAME = "cli-profile"
DEFAULT_DURATION_SECONDS = 43200
# Roles allow one hour unless their MaxSessionDuration was raised
DEFAULT_ROLE_DURATION_SECONDS = 3600


class CliProfileError(Exception):
    """Base class for cli-profile errors."""


class CredentialWriteError(CliProfileError):
    """The credentials document could not accept or encode an entry."""


class CredentialFetchError(CliProfileError):
    """AWS refused or failed to hand out account details or credentials."""


def resolve_profile_name(account, profile_name=""):
    """
    Pick the profile name to write credentials under.

    An explicit profile name wins, then the account alias, then the account name.

    Args:
        account: Account the credentials belong to
        profile_name: Explicit profile name override ("" for none)

    Returns:
        str: Profile name
    """
    if profile_name:
        return profile_name
    if account.alias:
        return account.alias
    return account.name


def new_cloud_cli_entry(creds, account, profile_name=""):
    """Build the credentials file entry for an account."""
    return CloudCliEntry(
        profile_name=resolve_profile_name(account, profile_name),
        key_id=creds.access_key_id,
        key=creds.secret_access_key,
        token=creds.session_token,
        expiration=creds.expiration,
    )


def new_credentials_document():
    """
    Create an empty credentials document.

    Option names keep their case and interpolation is off, so secrets
    containing '%' are stored as-is.
    """
    config = configparser.ConfigParser(interpolation=None)
    config.optionxform = str
    return config


def _check_storable(what, value):
    # INI lines end at a line break and lose surrounding whitespace on read
    if "\n" in value or "\r" in value:
        raise CredentialWriteError(f"{what} must not contain line breaks")
    if value != value.strip():
        raise CredentialWriteError(f"{what} must not start or end with whitespace")


def _drop_case_variants(config, section_name, key):
    """Remove options that differ from key only in case (botocore lowercases them)."""
    defaults = config.defaults()
    for option in config.options(section_name):
        if option != key and option.lower() == key and option not in defaults:
            config.remove_option(section_name, option)


def save_credential_entry(config, entry):
    """
    Add or overwrite a profile section with the entry's credentials.

    Other keys in the section and all other sections are left alone, except
    that spellings of the credential keys in another case are replaced.

    Args:
        config: ConfigParser holding the credentials document
        entry: CloudCliEntry to store

    Raises:
        CredentialWriteError: If the document cannot hold the entry
    """
    if not entry.profile_name:
        raise CredentialWriteError("Profile name must not be empty")
    if entry.profile_name == config.default_section:
        raise CredentialWriteError(
            f"Profile name '{entry.profile_name}' is reserved for INI defaults"
        )
    _check_storable("Profile name", entry.profile_name)

    values = [
        (ACCESS_KEY_ID_KEY, entry.key_id),
        (SECRET_ACCESS_KEY_KEY, entry.key),
        (SESSION_TOKEN_KEY, entry.token),
    ]
    if entry.expiration:
        values.append((EXPIRATION_KEY, entry.expiration))

    for key, value in values:
        if not isinstance(value, str):
            raise CredentialWriteError(f"Value for {key} must be a string")
        _check_storable(f"Value for {key}", value)

    try:
        if not config.has_section(entry.profile_name):
            config.add_section(entry.profile_name)
        section = config[entry.profile_name]
        for key, value in values:
            _drop_case_variants(config, entry.profile_name, key)
            section[key] = value
    except (configparser.Error, ValueError, TypeError) as e:
        raise CredentialWriteError(
            f"Failed to store profile '{entry.profile_name}': {e}"
        ) from e


def dumps_credentials(config):
    """Serialize a credentials document to UTF-8 bytes."""
    buf = io.StringIO()
    try:
        config.write(buf)
    except (configparser.Error, ValueError, TypeError) as e:
        raise CredentialWriteError(f"Failed to encode credentials: {e}") from e
    return buf.getvalue().encode("utf-8")


def loads_credentials(data):
    """
    Parse a credentials document from bytes.

    Args:
        data: UTF-8 encoded INI text

    Returns:
        ConfigParser with the parsed document

    Raises:
        CredentialWriteError: If the data is not a valid credentials document
    """
    config = new_credentials_document()
    try:
        config.read_string(data.decode("utf-8"))
    except (UnicodeDecodeError, configparser.Error) as e:
        raise CredentialWriteError(f"Failed to parse credentials: {e}") from e
    return config


def get_aws_credentials_path():
    """Get the AWS credentials file path, honouring AWS_SHARED_CREDENTIALS_FILE."""
    override = os.environ.get("AWS_SHARED_CREDENTIALS_FILE")
    if override:
        return os.path.expanduser(override)
    return os.path.expanduser("~/.aws/credentials")


def read_aws_credentials(creds_file):
    """
    Read AWS credentials file.

    Args:
        creds_file: Path to credentials file

    Returns:
        ConfigParser object with credentials (empty if the file does not exist)
    """
    if not os.path.exists(creds_file):
        return new_credentials_document()
    with open(creds_file, "rb") as f:
        return loads_credentials(f.read())


def write_aws_credentials(creds_file, config):
    """Write AWS credentials file with secure permissions."""
    data = dumps_credentials(config)
    Path(creds_file).parent.mkdir(parents=True, exist_ok=True)

    # Create with 0600 up front so the file is never briefly world readable
    fd = os.open(creds_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


def update_profile_credentials(entry, creds_file=None):
    """
    Store an entry in the AWS credentials file.

    Args:
        entry: CloudCliEntry to store
        creds_file: Credentials file path (defaults to get_aws_credentials_path())

    Returns:
        str: Path of the credentials file that was written
    """
    if creds_file is None:
        creds_file = get_aws_credentials_path()
    config = read_aws_credentials(creds_file)
    save_credential_entry(config, entry)
    write_aws_credentials(creds_file, config)
    return creds_file


def list_profiles(creds_file=None):
    """List profile names in the credentials file, in file order."""
    if creds_file is None:
        creds_file = get_aws_credentials_path()
    return read_aws_credentials(creds_file).sections()


def create_session(profile_name=None):
    """
    Create a boto3 session.

    Args:
        profile_name: AWS profile to use, or None for the default credential chain

    Returns:
        boto3.Session

    Raises:
        CredentialFetchError: If the profile does not exist
    """
    try:
        return boto3.Session(profile_name=profile_name)
    except BotoCoreError as e:
        raise CredentialFetchError(f"Cannot use profile '{profile_name}': {e}") from e


def get_account_alias(session):
    """
    Get the first IAM account alias, or "" if there is none.

    Callers without iam:ListAccountAliases get "" as well.
    """
    try:
        response = session.client("iam").list_account_aliases()
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")
        if error_code in ("AccessDenied", "AccessDeniedException"):
            return ""
        raise CredentialFetchError(f"Failed to list account aliases: {e}") from e
    except BotoCoreError as e:
        raise CredentialFetchError(f"AWS connection failed: {e}") from e

    aliases = response.get("AccountAliases", [])
    return aliases[0] if aliases else ""


def get_account(session, account_name=None):
    """
    Describe the account behind a session.

    Args:
        session: boto3.Session to query
        account_name: Human-readable account name (defaults to the account id)

    Returns:
        Account
    """
    try:
        identity = session.client("sts").get_caller_identity()
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")
        if error_code == "InvalidClientTokenId":
            raise CredentialFetchError(
                "Source credentials are invalid or expired (InvalidClientTokenId)"
            ) from e
        raise CredentialFetchError(f"Failed to identify account: {e}") from e
    except BotoCoreError as e:
        raise CredentialFetchError(f"AWS connection failed: {e}") from e

    account_id = identity["Account"]
    return Account(
        id=account_id,
        name=account_name or account_id,
        alias=get_account_alias(session),
    )


def get_session_credentials(
    session,
    duration_seconds=None,
    role_arn=None,
    session_name=DEFAULT_SESSION_NAME,
):
    """
    Get temporary credentials using GetSessionToken, or AssumeRole if a role is given.

    Args:
        session: boto3.Session to call STS with
        duration_seconds: How long credentials should be valid
            (default: 12 hours for session tokens, 1 hour for roles)
        role_arn: Role to assume instead of getting a session token
        session_name: Role session name used with AssumeRole

    Returns:
        CloudCredentials
    """
    if duration_seconds is None:
        duration_seconds = DEFAULT_ROLE_DURATION_SECONDS if role_arn else DEFAULT_DURATION_SECONDS

    sts_client = session.client("sts")
    try:
        if role_arn:
            response = sts_client.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                DurationSeconds=duration_seconds,
            )
        else:
            response = sts_client.get_session_token(DurationSeconds=duration_seconds)
    except ClientError as e:
        target = f"role '{role_arn}'" if role_arn else "session token"
        raise CredentialFetchError(
            f"Failed to get temporary credentials for {target}: {e}"
        ) from e
    except BotoCoreError as e:
        raise CredentialFetchError(f"AWS connection failed: {e}") from e

    return CloudCredentials.from_sts(response["Credentials"])
