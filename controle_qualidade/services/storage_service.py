import os
import uuid
import logging

from werkzeug.utils import secure_filename

from controle_qualidade.config import config
from controle_qualidade.domain.exceptions import DependencyFailureError

logger = logging.getLogger(__name__)

PHOTO_FOLDER = "inspections"


class StorageService:
    """
    Abstração para upload de fotos de inspeção (Local vs Google Cloud Storage).
    """
    def __init__(self, bucket_name=None, upload_folder=None, client=None):
        self.bucket_name = bucket_name if bucket_name is not None else config.GCP_STORAGE_BUCKET
        self.upload_folder = upload_folder or config.UPLOAD_FOLDER
        self.client = client
        if self.client is None:
            self._setup_client()

    def _setup_client(self):
        if not self.bucket_name:
            logger.warning("📂 Storage Service: Bucket não definido. Usando armazenamento LOCAL.")
            return
        try:
            from google.cloud import storage
            self.client = storage.Client()
            logger.info(f"☁️ Storage Service: Configurado para GCS (Bucket: {self.bucket_name})")
        except Exception as e:
            logger.error(f"❌ Erro ao inicializar client GCS: {e}")
            self.client = None

    def upload_photo(self, data: bytes, inspection_id, filename=None) -> str:
        """
        Faz upload de uma foto da inspeção.
        Retorna URL pública (https://storage.googleapis.com/...) ou local (/static/uploads/...).

        Raises:
            DependencyFailureError: se o armazenamento falhar.
        """
        if not data:
            raise DependencyFailureError("armazenamento de fotos", "Foto vazia não pode ser enviada")

        name = f"{uuid.uuid4().hex}_{secure_filename(filename or 'foto.jpg') or 'foto.jpg'}"
        blob_path = f"{PHOTO_FOLDER}/{inspection_id}/{name}"

        # 1. Google Cloud Storage
        if self.client and self.bucket_name:
            try:
                bucket = self.client.bucket(self.bucket_name)
                blob = bucket.blob(blob_path)
                blob.upload_from_string(data, content_type=_content_type(name))
            except Exception as e:
                logger.error(f"❌ Erro no Upload GCS: {e}")
                raise DependencyFailureError("armazenamento de fotos", "Erro ao enviar foto") from e
            return f"https://storage.googleapis.com/{self.bucket_name}/{blob_path}"

        # 2. Local Storage (Dev / Fallback)
        target_path = os.path.join(self.upload_folder, *blob_path.split("/"))
        try:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            with open(target_path, "wb") as dest_f:
                dest_f.write(data)
        except OSError as e:
            logger.error(f"❌ Erro no Upload Local: {e}")
            raise DependencyFailureError("armazenamento de fotos", "Erro ao salvar foto") from e

        logger.info(f"✅ Foto salva localmente: {target_path}")
        return f"/static/uploads/{blob_path}"


def _content_type(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return {
        ".png": "image/png",
        ".webp": "image/webp",
        ".gif": "image/gif",
    }.get(ext, "image/jpeg")
