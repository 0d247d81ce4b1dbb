"""Boto3 client kwargs for static credentials.

Credentials are always passed explicitly so boto3 never falls back to its
default provider chain (profiles, SSO, instance role).
"""

from typing import Any

from src.aws.credentials import Credentials


def get_boto3_client_kwargs(credentials: Credentials, region: str) -> dict[str, Any]:
    """Return kwargs for boto3.client() with an explicit region and static credentials.

    No session token is set, so the credentials never expire or refresh.

    Args:
        credentials: Resolved access key pair
        region: AWS region name

    Returns:
        Dict with 'region_name', 'aws_access_key_id' and 'aws_secret_access_key'.
    """
    return {
        "region_name": region,
        "aws_access_key_id": credentials.access_key_id,
        "aws_secret_access_key": credentials.secret_access_key,
    }
