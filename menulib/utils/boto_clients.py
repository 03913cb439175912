import os
import boto3

from botocore.config import Config


def main_boto_region() -> str:
    return os.environ.get('AWS_REGION', 'eu-central-1')


def aws_config_ddb() -> Config:
    return Config(retries={'max_attempts': 30}, region_name=main_boto_region())


# DynamoDB Resource.
# Resources represent an object-oriented interface to AWS services. Every resource instance has attributes and methods.
def dynamodb_resource(endpoint_url=None):
    if endpoint_url:
        return boto3.resource('dynamodb', endpoint_url=endpoint_url, region_name=main_boto_region())
    return boto3.resource('dynamodb', config=aws_config_ddb())


# S3 Client.
# Clients provide a low-level interface to AWS services whose methods map close to 1:1 with service APIs.
def s3_client():
    return boto3.client('s3', region_name=main_boto_region())
