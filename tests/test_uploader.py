"""
Unit tests for the S3 uploader module.
"""
import unittest
from unittest.mock import Mock, patch

from botocore.exceptions import ClientError

from corpus_gen.s3_uploader import (
    CORPUS_CONTENT_TYPE,
    calculate_multipart_stats,
    multipart_upload_stream,
    put_single_object
)


class TestS3Uploader(unittest.TestCase):
    """Test cases for S3 upload utilities."""

    def setUp(self):
        """Set up test fixtures."""
        self.bucket = 'test-bucket'
        self.key = 'corpus/run_1/events.ndjson'
        self.region = 'us-east-1'
        self.data = b'{"a":1}\n{"a":2}\n'

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_put_single_object_success(self, mock_boto3_client):
        """Test successful single object upload."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_response = {'ETag': '"test-etag"', 'VersionId': 'test-version'}
        mock_s3_client.put_object.return_value = mock_response

        result = put_single_object(self.bucket, self.key, self.data, self.region)

        mock_boto3_client.assert_called_once_with('s3', region_name=self.region)
        mock_s3_client.put_object.assert_called_once_with(
            Bucket=self.bucket,
            Key=self.key,
            Body=self.data,
            ContentType=CORPUS_CONTENT_TYPE
        )
        self.assertEqual(result, mock_response)

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_put_single_object_failure(self, mock_boto3_client):
        """Test single object upload failure."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.put_object.side_effect = ClientError(
            {'Error': {'Code': 'NoSuchBucket', 'Message': 'Bucket not found'}},
            'PutObject'
        )

        with self.assertRaises(ClientError) as ctx:
            put_single_object(self.bucket, self.key, self.data, self.region)
        self.assertEqual(ctx.exception.response['Error']['Code'], 'UploadFailed')

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_multipart_upload_stream_success(self, mock_boto3_client):
        """Test that small chunks are regrouped into full parts."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.create_multipart_upload.return_value = {'UploadId': 'test-upload-id'}
        mock_s3_client.upload_part.return_value = {'ETag': '"test-etag"'}
        mock_s3_client.complete_multipart_upload.return_value = {'Location': 'test-location'}

        # 1MB in 256KB chunks
        def chunks():
            for _ in range(4):
                yield b'x' * (256 * 1024)

        result = multipart_upload_stream(self.bucket, self.key, chunks(), 0.5, self.region)

        mock_s3_client.create_multipart_upload.assert_called_once_with(
            Bucket=self.bucket,
            Key=self.key,
            ContentType=CORPUS_CONTENT_TYPE
        )
        self.assertEqual(mock_s3_client.upload_part.call_count, 2)
        for call in mock_s3_client.upload_part.call_args_list:
            self.assertEqual(len(call.kwargs['Body']), 512 * 1024)

        _, kwargs = mock_s3_client.complete_multipart_upload.call_args
        self.assertEqual(kwargs['MultipartUpload'], {'Parts': [
            {'ETag': '"test-etag"', 'PartNumber': 1},
            {'ETag': '"test-etag"', 'PartNumber': 2},
        ]})
        self.assertEqual(result, {'Location': 'test-location', 'Parts': 2, 'PartSizeMB': 0.5})

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_multipart_upload_stream_remainder(self, mock_boto3_client):
        """Test that leftover bytes are sent as a smaller final part."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.create_multipart_upload.return_value = {'UploadId': 'test-upload-id'}
        mock_s3_client.upload_part.return_value = {'ETag': '"test-etag"'}
        mock_s3_client.complete_multipart_upload.return_value = {'Location': 'test-location'}

        chunks = [b'y' * (700 * 1024)]
        result = multipart_upload_stream(self.bucket, self.key, chunks, 0.5, self.region)

        sizes = [len(call.kwargs['Body']) for call in mock_s3_client.upload_part.call_args_list]
        self.assertEqual(sizes, [512 * 1024, 188 * 1024])
        self.assertEqual(result['Parts'], 2)

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_multipart_upload_stream_empty(self, mock_boto3_client):
        """Test that an empty corpus still completes with one empty part."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.create_multipart_upload.return_value = {'UploadId': 'test-upload-id'}
        mock_s3_client.upload_part.return_value = {'ETag': '"test-etag"'}
        mock_s3_client.complete_multipart_upload.return_value = {'Location': 'test-location'}

        result = multipart_upload_stream(self.bucket, self.key, [], 8, self.region)

        mock_s3_client.upload_part.assert_called_once()
        self.assertEqual(result['Parts'], 1)

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_multipart_upload_stream_failure(self, mock_boto3_client):
        """Test that a failed part upload aborts the multipart upload."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.create_multipart_upload.return_value = {'UploadId': 'test-upload-id'}
        mock_s3_client.upload_part.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'Access denied'}},
            'UploadPart'
        )

        with self.assertRaises(ClientError):
            multipart_upload_stream(self.bucket, self.key, [b'x' * 1024], 8, self.region)

        mock_s3_client.abort_multipart_upload.assert_called_once_with(
            Bucket=self.bucket,
            Key=self.key,
            UploadId='test-upload-id'
        )

    @patch('corpus_gen.s3_uploader.boto3.client')
    def test_multipart_create_failure(self, mock_boto3_client):
        """Test that nothing is aborted when the upload was never created."""
        mock_s3_client = Mock()
        mock_boto3_client.return_value = mock_s3_client
        mock_s3_client.create_multipart_upload.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'Access denied'}},
            'CreateMultipartUpload'
        )

        with self.assertRaises(ClientError):
            multipart_upload_stream(self.bucket, self.key, [b'x'], 8, self.region)

        mock_s3_client.abort_multipart_upload.assert_not_called()

    def test_calculate_multipart_stats_exact_fit(self):
        stats = calculate_multipart_stats(1024 * 1024, 0.5)

        self.assertEqual(stats['total_parts'], 2)
        self.assertEqual(stats['last_part_bytes'], 512 * 1024)

    def test_calculate_multipart_stats_remainder(self):
        stats = calculate_multipart_stats(1200 * 1024, 0.5)

        self.assertEqual(stats['total_parts'], 3)
        self.assertEqual(stats['last_part_bytes'], 176 * 1024)

    def test_calculate_multipart_stats_zero_size(self):
        stats = calculate_multipart_stats(0, 8)

        self.assertEqual(stats['total_parts'], 0)
        self.assertEqual(stats['last_part_bytes'], 0)


if __name__ == '__main__':
    unittest.main()
