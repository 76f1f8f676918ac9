"""
Stockage objet S3-compatible des supports de cours (aioboto3).

Les routes reçoivent le service via la dépendance get_storage, ce qui permet
aux tests d'injecter un double sans toucher au réseau.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from app.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    """Échec d'une opération sur le stockage distant."""


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str
    size: int


def build_object_key(filename: str, folder: Optional[str] = None) -> str:
    """Clé unique : <dossier>/<uuid>-<nom nettoyé>."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename).strip("._") or "file"
    return f"{folder or settings.S3_FOLDER}/{uuid.uuid4()}-{safe_name}"


class S3StorageService:
    """Opérations d'upload, de suppression et de lien de téléchargement."""

    def __init__(self):
        self.session = aioboto3.Session()
        self.endpoint_url = settings.S3_ENDPOINT
        self.bucket_name = settings.S3_BUCKET
        self.region = settings.S3_REGION
        self.s3_config = Config(signature_version="s3v4")

    def _get_s3_client(self):
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.S3_ACCESS_KEY or None,
            aws_secret_access_key=settings.S3_SECRET_KEY or None,
            region_name=self.region,
            config=self.s3_config,
        )

    def object_url(self, key: str) -> str:
        """URL permanente de l'objet (l'accès reste soumis aux droits du bucket)."""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def upload_file(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        key = build_object_key(filename)
        async with self._get_s3_client() as s3:
            try:
                await s3.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=content,
                    ContentType=content_type,
                    ACL="private",
                )
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                raise StorageError(f"Échec de l'upload S3 : {error_code}") from e

        logger.info("Objet S3 créé : %s (%d octets)", key, len(content))
        return StoredObject(key=key, url=self.object_url(key), size=len(content))

    async def delete_file(self, key: str) -> None:
        async with self._get_s3_client() as s3:
            try:
                await s3.delete_object(Bucket=self.bucket_name, Key=key)
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                raise StorageError(f"Échec de la suppression S3 : {error_code}") from e

        logger.info("Objet S3 supprimé : %s", key)

    async def generate_presigned_url(self, key: str, expires_in: Optional[int] = None) -> str:
        if expires_in is None:
            expires_in = settings.PRESIGNED_URL_EXPIRE_MINUTES * 60

        async with self._get_s3_client() as s3:
            try:
                return await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket_name, "Key": key},
                    ExpiresIn=expires_in,
                )
            except ClientError as e:
                raise StorageError(f"Échec de génération du lien de téléchargement : {e}") from e


storage_service = S3StorageService()


def get_storage() -> S3StorageService:
    """Dépendance FastAPI: service de stockage partagé."""
    return storage_service
