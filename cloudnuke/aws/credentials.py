"""AWS credential validation."""

from __future__ import annotations

from typing import Optional

from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound

from .client import create_boto_client


class CredentialValidationError(Exception):
    """Raised when AWS credentials are missing or invalid."""


def validate_credentials(profile_name: Optional[str] = None) -> dict[str, str]:
    """Validate credentials by calling STS GetCallerIdentity.

    Args:
        profile_name: AWS profile name (optional)

    Returns:
        Identity dictionary with account_id, arn and user_id

    Raises:
        CredentialValidationError: If credentials are missing, the profile is unknown, or STS rejects them
    """
    try:
        client = create_boto_client("sts", profile_name=profile_name)
        identity = client.get_caller_identity()
    except ProfileNotFound as e:
        raise CredentialValidationError(f"AWS profile not found: {profile_name}") from e
    except NoCredentialsError as e:
        raise CredentialValidationError("No AWS credentials found. Configure a profile or environment credentials") from e
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        raise CredentialValidationError(f"AWS rejected the credentials: {error_code}") from e

    return {
        "account_id": identity["Account"],
        "arn": identity["Arn"],
        "user_id": identity["UserId"],
    }


def get_account_id(profile_name: Optional[str] = None) -> str:
    return validate_credentials(profile_name)["account_id"]
