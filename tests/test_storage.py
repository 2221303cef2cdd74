import boto3
import pytest
from botocore.stub import ANY, Stubber

from teamhub.api.aws_bucket_funcs.funcs import SpacesUploader, decode_image
from teamhub.api.errors import BadRequest, UploadFailed


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3", region_name="us-east-1", aws_access_key_id="test", aws_secret_access_key="test"
    )


def test_upload_stores_public_jpeg_in_folder(s3_client):
    with Stubber(s3_client) as stub:
        stub.add_response(
            "put_object",
            {},
            {
                "Bucket": "teamhub-test",
                "Key": ANY,
                "Body": b"hello",
                "ACL": "public-read",
                "ContentType": "image/jpeg",
            },
        )
        uploaded = SpacesUploader(s3_client).upload("data:image/jpeg;base64,aGVsbG8=")

    assert uploaded["key"].startswith("chat-images/")
    assert uploaded["key"].endswith(".jpg")
    assert uploaded["url"] == f"https://nyc3.digitaloceanspaces.test/teamhub-test/{uploaded['key']}"


def test_delete_removes_object(s3_client):
    with Stubber(s3_client) as stub:
        stub.add_response("delete_object", {}, {"Bucket": "teamhub-test", "Key": "chat-images/1.jpg"})
        SpacesUploader(s3_client).delete("chat-images/1.jpg")
        stub.assert_no_pending_responses()


def test_storage_errors_become_upload_failed(s3_client):
    with Stubber(s3_client) as stub:
        stub.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(UploadFailed):
            SpacesUploader(s3_client).upload("aGVsbG8=")


def test_invalid_base64_is_rejected():
    with pytest.raises(BadRequest):
        decode_image("not base64!")
