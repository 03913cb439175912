import os

import pytest
from chalice.config import Config
from chalice.local import LocalGateway
from moto import mock_aws

from menulib.context import AppContext, set_context, close_context
from menulib.seed import create_gen_table
from menulib.utils import boto_clients
from menulib.utils.auth import create_access_token
from menulib.utils.db import DbContext
from menulib.utils.exceptions import MediaStoreException
from menulib.utils.s3 import MediaStore, media_bucket

TEST_REGION = 'eu-central-1'
TEST_TABLE_NAME = 'restaurant-menu-test'
TEST_BUCKET_NAME = 'restaurant-menu-images-test'
TEST_JWT_SECRET = 'test-jwt-secret'

id_admin = '13303309-d941-486f-b600-3e90929ac50f'


class FailingMediaStore:
    """
    Media store double, every call fails the way an unreachable S3 would
    """

    def __init__(self):
        self.upload_calls = 0
        self.delete_calls = 0

    def upload(self, body, folder, transform):
        self.upload_calls += 1
        raise MediaStoreException('media store is unavailable')

    def delete_one(self, public_id):
        self.delete_calls += 1
        raise MediaStoreException('media store is unavailable')

    def delete_many(self, public_ids):
        self.delete_calls += 1
        raise MediaStoreException('media store is unavailable')


class RecordingMediaStore(MediaStore):
    """
    Real (mocked S3) media store which records its calls, deletes can be made to fail
    """

    def __init__(self, *args, fail_delete=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_delete = fail_delete
        self.calls = []

    def upload(self, body, folder, transform):
        self.calls.append(('upload', folder))
        return super().upload(body, folder, transform)

    def delete_one(self, public_id):
        self.calls.append(('delete_one', public_id))
        if self.fail_delete:
            raise MediaStoreException(f'{public_id} was not deleted')
        return super().delete_one(public_id)

    def delete_many(self, public_ids):
        public_ids = list(public_ids)
        self.calls.append(('delete_many', public_ids))
        if self.fail_delete:
            raise MediaStoreException(f'{len(public_ids)} images were not deleted')
        return super().delete_many(public_ids)


class PartialDeleteS3Client:
    """
    S3 client wrapper, the last key of every delete batch is reported back as not deleted
    """

    def __init__(self, client):
        self.client = client

    def __getattr__(self, name):
        return getattr(self.client, name)

    def delete_objects(self, Bucket, Delete):
        objects = Delete['Objects']
        response = self.client.delete_objects(Bucket=Bucket, Delete={**Delete, 'Objects': objects[:-1]})
        response['Errors'] = [{'Key': objects[-1]['Key'], 'Code': 'AccessDenied', 'Message': 'Access Denied'}]
        return response


@pytest.fixture
def aws_environ(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', TEST_REGION)
    monkeypatch.setenv('AWS_REGION', TEST_REGION)
    monkeypatch.setenv('GEN_TABLE_NAME', TEST_TABLE_NAME)
    monkeypatch.setenv('MEDIA_BUCKET_NAME', TEST_BUCKET_NAME)
    monkeypatch.setenv('JWT_SECRET', TEST_JWT_SECRET)
    monkeypatch.delenv('ENDPOINT_URL', raising=False)
    monkeypatch.delenv('MEDIA_PUBLIC_BASE_URL', raising=False)


@pytest.fixture
def app_context(aws_environ) -> AppContext:
    with mock_aws():
        db = DbContext().init()
        create_gen_table(db)
        s3 = boto_clients.s3_client()
        s3.create_bucket(Bucket=media_bucket(), CreateBucketConfiguration={'LocationConstraint': TEST_REGION})
        context = AppContext(db=db, media_store=MediaStore(client=s3))
        set_context(context)
        yield context
        close_context()


@pytest.fixture
def failing_media_store(app_context) -> FailingMediaStore:
    media_store = FailingMediaStore()
    app_context.media_store = media_store
    return media_store


@pytest.fixture
def recording_media_store(app_context) -> RecordingMediaStore:
    media_store = RecordingMediaStore(client=app_context.media_store.client, bucket=app_context.media_store.bucket)
    app_context.media_store = media_store
    return media_store


def local_gateway() -> LocalGateway:
    from app import app

    config = Config.create(chalice_stage=os.environ.get('stage', 'test'), app_name=app.app_name)
    return LocalGateway(app, config)


@pytest.fixture
def chalice_gateway(app_context) -> LocalGateway:
    yield local_gateway()


@pytest.fixture
def admin_token(aws_environ) -> str:
    return create_access_token(id_admin)


@pytest.fixture
def user_token(aws_environ) -> str:
    return create_access_token('e5b01491-e538-4be3-8d3c-a57db7fc43c1', role='user')


@pytest.fixture
def partial_delete_media_store(app_context) -> MediaStore:
    media_store = MediaStore(client=PartialDeleteS3Client(app_context.media_store.client),
                             bucket=app_context.media_store.bucket)
    app_context.media_store = media_store
    return media_store
