import os
from typing import Dict, Iterable, NamedTuple
from uuid import uuid4

from menulib.images import apply_transform
from menulib.utils import boto_clients
from menulib.utils.exceptions import MediaStoreException, MediaDeleteIncomplete
from menulib.utils.logger import logger

S3_DELETE_MAX_KEYS = 1000


def media_bucket() -> str:
    return os.environ.get('MEDIA_BUCKET_NAME', 'restaurant-menu-images')


def media_public_base_url(bucket: str) -> str:
    return os.environ.get('MEDIA_PUBLIC_BASE_URL') or f'https://{bucket}.s3.amazonaws.com'


class UploadResult(NamedTuple):
    url: str
    public_id: str


class MediaStore:
    """
    Remote image storage. An uploaded image is identified by its public_id (the S3 object key)
    and served from url.
    """

    def __init__(self, client=None, bucket=None, public_base_url=None):
        self.client = client or boto_clients.s3_client()
        self.bucket = bucket or media_bucket()
        self.public_base_url = (public_base_url or media_public_base_url(self.bucket)).rstrip('/')

    def upload(self, body: bytes, folder: str, transform: Dict) -> UploadResult:
        try:
            content = apply_transform(body, transform)
            public_id = f'{folder}/{uuid4().hex}.jpg'
            self.client.put_object(Bucket=self.bucket, Key=public_id, Body=content, ContentType='image/jpeg')
        except Exception as error:
            logger.error(f'MediaStore.upload ::: upload to bucket={self.bucket} failed, {error=}')
            raise MediaStoreException(f'Image upload failed: {error}') from error
        logger.info(f'MediaStore.upload ::: SUCCESS, {public_id=}')
        return UploadResult(url=f'{self.public_base_url}/{public_id}', public_id=public_id)

    def delete_one(self, public_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except Exception as error:
            raise MediaStoreException(f'Image {public_id} was not deleted: {error}') from error
        logger.info(f'MediaStore.delete_one ::: SUCCESS, {public_id=}')

    def delete_many(self, public_ids: Iterable[str]) -> int:
        """
        Deletes images in batches of 1000 keys (S3 limit).
        :return:
        number of deleted images
        """
        public_ids = list(public_ids)
        deleted = 0
        errors = []
        for start in range(0, len(public_ids), S3_DELETE_MAX_KEYS):
            chunk = public_ids[start:start + S3_DELETE_MAX_KEYS]
            try:
                response = self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={'Objects': [{'Key': key} for key in chunk], 'Quiet': False}
                )
            except Exception as error:
                logger.error(f'MediaStore.delete_many ::: batch failed after {deleted} images deleted, {error=}')
                raise MediaDeleteIncomplete(f'Batch image delete failed: {error}', deleted=deleted) from error
            deleted += len(response.get('Deleted', []))
            errors.extend(response.get('Errors', []))
        if errors:
            logger.error(f'MediaStore.delete_many ::: {deleted} images deleted, {len(errors)} failed')
            raise MediaDeleteIncomplete(f'{len(errors)} images were not deleted: {errors}', deleted=deleted)
        logger.info(f'MediaStore.delete_many ::: SUCCESS, {deleted} images deleted')
        return deleted
