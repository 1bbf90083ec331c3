"""Infrastructure layer for Redis and the Uploadcare service."""

from .redis_file_repository import RedisFileRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .redis_share_link_repository import RedisShareLinkRepository
from .uploadcare_gateway import UploadcareAssetGateway, UploadcareBlobStore, UploadcareClient

__all__ = [
    'RedisConnectionManager',
    'RedisFileRepository',
    'RedisRepository',
    'RedisShareLinkRepository',
    'UploadcareAssetGateway',
    'UploadcareBlobStore',
    'UploadcareClient',
]
