"""
Command-line interface for cli-profile.
"""

import argparse
import os
import sys

from .core import (
    CliProfileError,
    CredentialFetchError,
    create_session,
    get_account,
    get_aws_credentials_path,
    get_session_credentials,
    list_profiles,
    new_cloud_cli_entry,
    update_profile_credentials,
)
from .models import mask_secret

MAX_DURATION_HOURS = 36


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cli-profile",
        description="Fetch temporary AWS credentials for an account and store them as a CLI profile",
        epilog="Examples:\n"
        "  cli-profile                                   # Profile named after the account alias\n"
        "  cli-profile --account-name prod               # Name the account 'prod' when it has no alias\n"
        "  cli-profile --profile ci --duration 1         # 1-hour credentials in profile 'ci'\n"
        "  cli-profile --role-arn arn:aws:iam::123456789012:role/admin --profile admin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--source-profile",
        default=None,
        help="AWS profile used to call STS (defaults to AWS_PROFILE, then the boto3 default chain)",
    )
    parser.add_argument(
        "--profile",
        default="",
        help="Profile name to write (defaults to the account alias, then the account name)",
    )
    parser.add_argument(
        "--account-name",
        default=None,
        help="Human-readable account name used when the account has no alias (default: account id)",
    )
    parser.add_argument(
        "--role-arn",
        default=None,
        help="Assume this role instead of requesting a session token",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Duration in hours for temporary credentials "
        f"(default: 12, or 1 with --role-arn; max: {MAX_DURATION_HOURS})",
    )
    parser.add_argument(
        "--credentials-file",
        default=None,
        help="Credentials file to update (defaults to AWS_SHARED_CREDENTIALS_FILE, then ~/.aws/credentials)",
    )
    parser.add_argument(
        "--profiles",
        action="store_true",
        help="List the profiles in the credentials file and exit",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.duration is not None and not 1 <= args.duration <= MAX_DURATION_HOURS:
        parser.error(f"--duration must be between 1 and {MAX_DURATION_HOURS} hours")

    creds_file = args.credentials_file or get_aws_credentials_path()

    try:
        if args.profiles:
            for name in list_profiles(creds_file):
                print(name)
            return 0

        source_profile = args.source_profile or os.environ.get("AWS_PROFILE")
        session = create_session(source_profile)

        account = get_account(session, account_name=args.account_name)
        print(f"✓ Account: {account.id}", file=sys.stderr)
        if account.alias:
            print(f"✓ Alias: {account.alias}", file=sys.stderr)

        # None picks the session-token or role default
        duration_seconds = args.duration * 3600 if args.duration is not None else None
        creds = get_session_credentials(
            session,
            duration_seconds=duration_seconds,
            role_arn=args.role_arn,
        )
        print(f"✓ Access key: {mask_secret(creds.access_key_id)}", file=sys.stderr)

        entry = new_cloud_cli_entry(creds, account, args.profile)
        update_profile_credentials(entry, creds_file)
    except CredentialFetchError as e:
        print("Error: Failed to get credentials from AWS", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        return 1
    except CliProfileError as e:
        print(f"Error: Failed to update {creds_file}", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Cannot access {creds_file}: {e}", file=sys.stderr)
        return 1

    print(f"✓ Profile '{entry.profile_name}' written to {creds_file}", file=sys.stderr)
    if entry.expiration:
        print(f"✓ Expires: {entry.expiration}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
