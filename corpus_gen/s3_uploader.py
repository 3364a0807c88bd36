"""
S3 upload of generated corpora, as a single object or a multipart upload.
"""
import logging
from typing import Iterable, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

CORPUS_CONTENT_TYPE = 'application/x-ndjson'


def put_single_object(
    bucket: str,
    key: str,
    data: bytes,
    region: str = 'us-east-1'
) -> dict:
    """
    Upload a whole corpus as one S3 object.

    Args:
        bucket: S3 bucket name
        key: S3 object key
        data: Corpus bytes
        region: AWS region

    Returns:
        Response from S3 put_object

    Raises:
        ClientError: If S3 upload fails
    """
    s3_client = boto3.client('s3', region_name=region)

    try:
        return s3_client.put_object(
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=CORPUS_CONTENT_TYPE
        )
    except ClientError as e:
        raise ClientError(
            {'Error': {'Code': 'UploadFailed', 'Message': f"Failed to upload corpus to s3://{bucket}/{key}: {e}"}},
            'PutObject'
        ) from e


def multipart_upload_stream(
    bucket: str,
    key: str,
    chunks: Iterable[bytes],
    part_size_mb: float,
    region: str = 'us-east-1'
) -> dict:
    """
    Upload a streamed corpus using S3 multipart upload.

    Incoming chunks are regrouped into parts of part_size_mb; the remainder
    is sent as the final part. The upload is aborted if any step fails.

    Args:
        bucket: S3 bucket name
        key: S3 object key
        chunks: Iterable yielding corpus chunks
        part_size_mb: Size of each part in megabytes
        region: AWS region

    Returns:
        Dict with the object location, number of parts and part size

    Raises:
        ClientError: If multipart upload fails
    """
    s3_client = boto3.client('s3', region_name=region)
    part_size_bytes = int(part_size_mb * 1024 * 1024)
    upload_id: Optional[str] = None

    try:
        response = s3_client.create_multipart_upload(
            Bucket=bucket,
            Key=key,
            ContentType=CORPUS_CONTENT_TYPE
        )
        upload_id = response['UploadId']

        parts = []
        pending = bytearray()

        def upload_part(body: bytes) -> None:
            part_number = len(parts) + 1
            part_response = s3_client.upload_part(
                Bucket=bucket,
                Key=key,
                PartNumber=part_number,
                UploadId=upload_id,
                Body=body
            )
            parts.append({'ETag': part_response['ETag'], 'PartNumber': part_number})

        for chunk in chunks:
            pending += chunk
            while len(pending) >= part_size_bytes:
                upload_part(bytes(pending[:part_size_bytes]))
                del pending[:part_size_bytes]

        if pending or not parts:
            upload_part(bytes(pending))

        response = s3_client.complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={'Parts': parts}
        )

        return {
            'Location': response['Location'],
            'Parts': len(parts),
            'PartSizeMB': part_size_mb
        }

    except ClientError as e:
        if upload_id is not None:
            try:
                s3_client.abort_multipart_upload(
                    Bucket=bucket,
                    Key=key,
                    UploadId=upload_id
                )
            except ClientError as abort_error:
                logger.warning("failed to abort multipart upload %s: %s", upload_id, abort_error)

        raise ClientError(
            {'Error': {'Code': 'UploadFailed', 'Message': f"Failed to upload corpus to s3://{bucket}/{key}: {e}"}},
            'CompleteMultipartUpload'
        ) from e


def calculate_multipart_stats(total_bytes: int, part_size_mb: float) -> dict:
    """
    Calculate multipart upload statistics for a corpus of known size.

    Args:
        total_bytes: Total size of the corpus in bytes
        part_size_mb: Size of each part in megabytes

    Returns:
        Dictionary with multipart statistics
    """
    if total_bytes == 0:
        return {
            'total_bytes': 0,
            'part_size_mb': part_size_mb,
            'total_parts': 0,
            'last_part_bytes': 0
        }

    part_size_bytes = int(part_size_mb * 1024 * 1024)
    total_parts = (total_bytes + part_size_bytes - 1) // part_size_bytes
    last_part_bytes = total_bytes % part_size_bytes or part_size_bytes

    return {
        'total_bytes': total_bytes,
        'part_size_mb': part_size_mb,
        'total_parts': total_parts,
        'last_part_bytes': last_part_bytes
    }
