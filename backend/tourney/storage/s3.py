import asyncio
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from tourney.config import Config
from tourney.storage.base import ObjectStore

_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class S3ObjectStore(ObjectStore):
    """S3-compatible bucket (AWS S3 or MinIO). boto3 is blocking, so calls run in a thread."""

    def __init__(self, client: Any, bucket: str, timeout_seconds: float) -> None:
        super().__init__(timeout_seconds)
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_config(cls, config: Config) -> "S3ObjectStore":
        client = boto3.client(
            "s3",
            endpoint_url=config.s3_endpoint_url,
            aws_access_key_id=config.s3_access_key,
            aws_secret_access_key=config.s3_secret_key,
            region_name=config.s3_region,
            config=BotoConfig(
                connect_timeout=config.object_store_timeout_seconds,
                read_timeout=config.object_store_timeout_seconds,
                retries={"max_attempts": 2},
            ),
        )
        return cls(client, config.s3_bucket, config.object_store_timeout_seconds)

    async def _upload(self, key: str, data: bytes, metadata: dict[str, str]) -> None:
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=data,
            Metadata=metadata,
            ContentType="application/octet-stream",
        )

    async def _download(self, key: str) -> bytes:
        response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
        return await asyncio.to_thread(response["Body"].read)

    async def _copy(self, source_key: str, destination_key: str) -> None:
        await asyncio.to_thread(
            self.client.copy_object,
            Bucket=self.bucket,
            Key=destination_key,
            CopySource={"Bucket": self.bucket, "Key": source_key},
        )

    async def _delete(self, key: str) -> None:
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)

    async def _exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if str(exc.response.get("Error", {}).get("Code")) in _MISSING_OBJECT_CODES:
                return False
            raise
        return True

    async def _list_keys(self, prefix: str) -> list[str]:
        def collect_keys() -> list[str]:
            paginator = self.client.get_paginator("list_objects_v2")
            return [
                item["Key"]
                for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix)
                for item in page.get("Contents", [])
            ]

        return await asyncio.to_thread(collect_keys)
