import boto3
from botocore.config import Config

from .config import Settings, settings


def make_s3_client(cfg: Settings = settings):
    session = boto3.session.Session(region_name=cfg.aws_region)
    return session.client(
        "s3",
        endpoint_url=cfg.aws_endpoint_url,
        config=Config(
            s3={"addressing_style": "path"},  # evita issues de virtual-host no LocalStack
            retries={"max_attempts": 10, "mode": "standard"},
        ),
    )
