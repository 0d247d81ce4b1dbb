"""Command-line entry point: build an authenticated S3 client and run one object operation."""

import argparse
import json
import sys
from typing import Any, Optional

from botocore.exceptions import ClientError

from src.aws import S3BootstrapError, S3Client, new_client
from src.clients import VaultClient, VaultClientError
from src.config import Settings, configure_logging, get_logger

logger = get_logger(__name__)


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a single S3 object operation with app-interface account credentials",
    )
    parser.add_argument(
        "--account",
        default=None,
        help="app-interface AWS account name (default: APP_INTERFACE_STATE_BUCKET_ACCOUNT)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline in seconds for the account query and the Vault read",
    )
    parser.add_argument("operation", choices=["head", "get", "put", "delete"])
    parser.add_argument("bucket")
    parser.add_argument("key")
    parser.add_argument("--file", help="File to upload (put) or write the object to (get)")
    return parser.parse_args(argv)


def run_operation(client: S3Client, args: argparse.Namespace) -> dict[str, Any]:
    """Perform the requested operation and return a JSON-serializable summary."""
    params = {"Bucket": args.bucket, "Key": args.key}

    if args.operation == "head":
        response = client.head_object(**params)
        return {
            "content_length": response.get("ContentLength"),
            "etag": response.get("ETag"),
            "last_modified": response.get("LastModified"),
        }

    if args.operation == "get":
        response = client.get_object(**params)
        body = response["Body"].read()
        if args.file:
            with open(args.file, "wb") as f:
                f.write(body)
        else:
            sys.stdout.buffer.write(body)
            return {}
        return {"bytes": len(body), "file": args.file}

    if args.operation == "put":
        if not args.file:
            raise ValueError("--file is required for put")
        with open(args.file, "rb") as f:
            response = client.put_object(Body=f.read(), **params)
        return {"etag": response.get("ETag")}

    client.delete_object(**params)
    return {"deleted": f"s3://{args.bucket}/{args.key}"}


def main(argv: Optional[list[str]] = None) -> int:
    """Build the client and run the operation.

    Any bootstrap failure aborts with exit code 1 before an object call is made.
    """
    args = _parse_args(argv)
    cfg = Settings()
    configure_logging(cfg.logging)

    try:
        # Vault is only needed when credentials are not in the environment
        vault_client = None
        if not cfg.missing_vault_settings():
            vault_client = VaultClient.from_settings(cfg.vault)
        client = new_client(
            vault_client,
            account_name=args.account,
            settings=cfg,
            timeout=args.timeout,
        )
    except (S3BootstrapError, VaultClientError) as e:
        logger.error("Fatal error creating S3 client", error=str(e), exc_info=True)
        return 1

    try:
        result = run_operation(client, args)
    except ClientError as e:
        logger.error(
            "S3 operation failed",
            operation=args.operation,
            bucket=args.bucket,
            key=args.key,
            error=str(e),
        )
        return 1
    except (OSError, ValueError) as e:
        logger.error("S3 operation aborted", operation=args.operation, error=str(e))
        return 1

    if result:
        print(json.dumps(result, indent=2, default=str))
    return 0


def run_sync() -> int:
    """Run main() and return its exit code."""
    return main()


if __name__ == "__main__":
    sys.exit(run_sync())
