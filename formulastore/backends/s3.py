"""S3 object backend (AWS S3 or any S3-compatible store such as MinIO).

Error mapping
-------------
- ``NoSuchKey`` / ``404`` on ``get_object`` -> ``ObjectNotFoundError``
- any other ``ClientError`` or ``BotoCoreError`` (timeouts, connection
  failures, missing credentials) -> ``BackendUnavailableError``

Connect/read timeouts and the retry budget come from ``StoreSettings`` so
no call can block indefinitely.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from formulastore.core.errors import (
    BackendUnavailableError,
    ConfigurationError,
    ObjectNotFoundError,
)

if TYPE_CHECKING:
    from formulastore.config import StoreSettings

logger = logging.getLogger(__name__)

# delete_objects accepts at most this many keys per request.
DELETE_BATCH_SIZE = 1000

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _batched(items: Iterable[dict[str, str]], size: int) -> Iterator[list[dict[str, str]]]:
    batch: list[dict[str, str]] = []
    for item in items:
        batch.append(item)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


class S3Backend:
    """``ObjectBackend`` over a single S3 bucket.

    Parameters
    ----------
    bucket:
        Bucket that holds both the formula and cache namespaces.
    client:
        A boto3 S3 client. Normally built by ``from_settings``; tests pass a
        client wrapped in ``botocore.stub.Stubber``.
    purge_versions:
        When ``True``, bulk deletes also remove every object version and
        delete marker, which is what empties a versioned bucket.
    """

    def __init__(self, bucket: str, client: Any, *, purge_versions: bool = False) -> None:
        if not bucket:
            raise ConfigurationError("S3 backend requires a bucket name")
        self._bucket = bucket
        self._client = client
        self._purge_versions = purge_versions
        self._closed = False

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> S3Backend:
        """Build a backend and its boto3 client from store settings.

        Explicit credentials are used when both halves of the key pair are
        set; otherwise boto3's default chain applies (environment, shared
        config, instance profile).
        """
        if not settings.bucket_name:
            raise ConfigurationError(
                "FORMULASTORE_BUCKET_NAME must be set for the s3 backend"
            )

        kwargs: dict[str, Any] = {
            "region_name": settings.region,
            "use_ssl": settings.use_ssl,
            "config": BotoConfig(
                connect_timeout=settings.connect_timeout_seconds,
                read_timeout=settings.read_timeout_seconds,
                retries={"max_attempts": settings.max_attempts},
            ),
        }
        if settings.endpoint_url:
            kwargs["endpoint_url"] = settings.endpoint_url
        if settings.has_static_credentials:
            kwargs["aws_access_key_id"] = settings.access_key_id
            kwargs["aws_secret_access_key"] = settings.secret_access_key

        client = boto3.client("s3", **kwargs)
        logger.info(
            "S3Backend: bucket=%s region=%s endpoint=%s",
            settings.bucket_name,
            settings.region,
            settings.endpoint_url or "aws",
        )
        return cls(settings.bucket_name, client, purge_versions=settings.purge_versions)

    @property
    def bucket(self) -> str:
        return self._bucket

    # ------------------------------------------------------------------
    # ObjectBackend
    # ------------------------------------------------------------------

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=payload,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise BackendUnavailableError(f"put_object {key} failed: {exc}", key=key) from exc
        logger.debug("S3Backend: put %s (%d bytes, %s)", key, len(payload), content_type)

    def get(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(f"No object at {key}", key=key) from exc
            raise BackendUnavailableError(f"get_object {key} failed: {exc}", key=key) from exc
        except BotoCoreError as exc:
            raise BackendUnavailableError(f"get_object {key} failed: {exc}", key=key) from exc

    def delete_prefix(self, prefix: str) -> int:
        """Delete every object under *prefix*, following listing pages.

        Objects are removed first, then (with ``purge_versions``) every
        remaining version and delete marker. Memory stays bounded by one
        batch, and a failure part-way leaves the earlier batches deleted.
        """
        try:
            removed = self._delete_batches(self._iter_objects(prefix))
            if self._purge_versions:
                removed += self._delete_batches(self._iter_versions(prefix))
        except (ClientError, BotoCoreError) as exc:
            raise BackendUnavailableError(
                f"Bulk delete under {prefix!r} in {self._bucket} failed: {exc}"
            ) from exc
        logger.info(
            "S3Backend: deleted %d objects under %r in %s", removed, prefix, self._bucket
        )
        return removed

    def delete_all(self) -> int:
        return self.delete_prefix("")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _iter_objects(self, prefix: str) -> Iterator[dict[str, str]]:
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            for summary in page.get("Contents", []):
                yield {"Key": summary["Key"]}

    def _iter_versions(self, prefix: str) -> Iterator[dict[str, str]]:
        paginator = self._client.get_paginator("list_object_versions")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            for entry in page.get("Versions", []) + page.get("DeleteMarkers", []):
                yield {"Key": entry["Key"], "VersionId": entry["VersionId"]}

    def _delete_batches(self, objects: Iterable[dict[str, str]]) -> int:
        removed = 0
        # Each full batch is deleted before the next listing page is requested.
        for batch in _batched(objects, DELETE_BATCH_SIZE):
            response = self._client.delete_objects(
                Bucket=self._bucket,
                Delete={"Objects": batch, "Quiet": True},
            )
            errors = response.get("Errors", [])
            for error in errors:
                logger.warning(
                    "S3Backend: could not delete %s: %s",
                    error.get("Key"),
                    error.get("Message") or error.get("Code"),
                )
            removed += len(batch) - len(errors)
        return removed
