"""
S3 storage utility for startup logos and pitch decks
"""
import boto3
import os
import logging
from functools import lru_cache
from typing import Any, Callable, Dict
from botocore.exceptions import ClientError, NoCredentialsError
from datetime import datetime, timezone

import config
from ..services.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class S3ObjectStorage:
    """
    S3 storage utility for uploading objects and resolving their URLs.

    A bucket is either public (logos, served by URL) or private (pitch decks,
    served through short-lived presigned URLs).
    """

    def __init__(self, bucket_name: str, region_name: str = None, public: bool = False):
        """
        Initialize S3 client

        Args:
            bucket_name: S3 bucket name
            region_name: AWS region (defaults to S3_REGION)
            public: Whether objects are readable through their plain URL
        """
        self.bucket_name = bucket_name
        self.region_name = region_name or config.S3_REGION
        self.public = public

        if not self.bucket_name:
            raise ValueError("S3 bucket name must be provided")

        try:
            # Initialize S3 client
            self.s3_client = boto3.client(
                's3',
                region_name=self.region_name,
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY')
            )

            # Test connection
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"S3 client initialized successfully for bucket: {self.bucket_name}")

        except NoCredentialsError:
            logger.error("AWS credentials not found")
            raise
        except ClientError as e:
            logger.error(f"Error initializing S3 client: {e}")
            raise

    def public_url(self, s3_key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com/{s3_key}"

    def upload_bytes(self,
                     data: bytes,
                     s3_key: str,
                     content_type: str,
                     metadata: Dict[str, str] = None) -> Dict[str, Any]:
        """
        Upload an in-memory file to S3 with metadata. Existing keys are never overwritten.

        Args:
            data: File contents
            s3_key: S3 object key (path in bucket)
            content_type: MIME type of file
            metadata: Additional metadata to store with file

        Returns:
            Dictionary with upload result information
        """
        try:
            file_metadata = {
                'file_size': str(len(data)),
                'upload_timestamp': datetime.now(timezone.utc).isoformat(),
                'content_type': content_type
            }
            if metadata:
                file_metadata.update(metadata)

            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=data,
                ContentType=content_type,
                Metadata=file_metadata,
                IfNoneMatch='*'
            )

            logger.info(f"Successfully uploaded {len(data)} bytes to s3://{self.bucket_name}/{s3_key}")

            return {
                'success': True,
                'bucket': self.bucket_name,
                's3_key': s3_key,
                's3_url': self.public_url(s3_key) if self.public else None,
                'content_type': content_type,
                'file_size': file_metadata['file_size']
            }

        except Exception as e:
            logger.error(f"Error uploading file to S3: {e}")
            return {
                'success': False,
                'error': str(e)
            }

    def generate_presigned_url(self, s3_key: str, expiration: int = 3600) -> str:
        """
        Generate a presigned URL for temporary access to S3 object

        Args:
            s3_key: S3 object key
            expiration: URL expiration time in seconds (default 1 hour)

        Returns:
            Presigned URL string, empty on failure
        """
        try:
            url = self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': s3_key},
                ExpiresIn=expiration
            )

            logger.info(f"Generated presigned URL for {s3_key} (expires in {expiration}s)")
            return url

        except Exception as e:
            logger.error(f"Error generating presigned URL: {e}")
            return ""


@lru_cache()
def get_logo_storage() -> S3ObjectStorage:
    """
    Storage for startup logos (public bucket)
    """
    return S3ObjectStorage(config.S3_LOGO_BUCKET, public=True)


@lru_cache()
def get_pitch_deck_storage() -> S3ObjectStorage:
    """
    Storage for pitch decks (private bucket)
    """
    return S3ObjectStorage(config.S3_PITCH_DECK_BUCKET, public=False)


StorageFactory = Callable[[], S3ObjectStorage]


def logo_storage_factory() -> StorageFactory:
    """
    Dependency handing out the logo storage unopened; requests without a
    logo never connect to S3
    """
    return get_logo_storage


def pitch_deck_storage_factory() -> StorageFactory:
    """
    Dependency handing out the pitch deck storage unopened
    """
    return get_pitch_deck_storage


def open_storage(factory: StorageFactory, error_message: str) -> S3ObjectStorage:
    """
    Build the storage behind factory.

    Raises:
        UpstreamError: the bucket could not be reached, with error_message
    """
    try:
        return factory()
    except Exception as e:
        logger.error(f"S3 storage unavailable: {e}")
        raise UpstreamError(error_message)
