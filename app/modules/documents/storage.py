import boto3
from botocore.exceptions import ClientError
from supabase import Client
from app.config import settings
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload a document to S3 and return its key"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return key
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete a document from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False

    def signed_url(self, key: str, expires_in: int) -> str:
        """Presigned GET URL for a document"""
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in
        )


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket: str = None):
        self.bucket = supabase.storage.from_(bucket or settings.documents_bucket)

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload a document to the Supabase Storage bucket and return its path"""
        self.bucket.upload(key, file_content, file_options={"content-type": content_type})
        return key

    def delete_file(self, key: str) -> bool:
        """Delete a document from the bucket"""
        try:
            self.bucket.remove([key])
            return True
        except Exception as e:
            logger.error(f"Failed to delete file from Supabase Storage: {str(e)}")
            return False

    def signed_url(self, key: str, expires_in: int) -> str:
        """Signed download URL; the response key differs between storage client versions"""
        response = self.bucket.create_signed_url(key, expires_in)
        url = (response.get("signedURL") or response.get("signedUrl")) if isinstance(response, dict) else None
        if not url:
            raise ValueError("Storage did not return a signed URL")
        return url


def get_document_storage(supabase: Client):
    """S3 when AWS credentials are configured, otherwise Supabase Storage"""
    if all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
        try:
            storage = S3Storage()
            logger.info("S3 storage initialized successfully")
            return storage
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseStorage(supabase)
