# printbay/services/storage.py

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
from fastapi.concurrency import run_in_threadpool

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.utils.files import content_type_for, safe_join

logger = logging.getLogger(__name__)


class StorageService:
    """
    Customer file storage.

    Configured: Azure Blob container, blob name `<customer>/<file_id>/<file_name>`.
    Unconfigured: bytes land under UPLOAD_DIR and the URL is `local://cache/<file_id>`.
    """

    name = "storage"

    def __init__(self, settings: Settings):
        self._connection_string = settings.azure_storage_connection_string
        self._container_name = settings.azure_storage_container_name
        self._configured = settings.storage_configured
        self.upload_root = Path(settings.UPLOAD_DIR)
        self._container: Optional[ContainerClient] = None
        self._service: Optional[BlobServiceClient] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return self._configured

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return
            if not self._configured:
                logger.warning("⚠️ Blob storage not configured, files stay on local disk")
                self._initialized = True
                return
            try:
                self._container = await run_in_threadpool(self._connect)
            except (AzureError, ValueError) as e:
                logger.error("❌ Blob storage initialization failed: %s", e)
                raise IntegrationError(self.name, "initialization failed", {"error": str(e)}) from e
            logger.info("✅ Blob storage ready: container=%s", self._container_name)
            self._initialized = True

    def _connect(self) -> ContainerClient:
        self._service = BlobServiceClient.from_connection_string(self._connection_string)
        container = self._service.get_container_client(self._container_name)
        try:
            container.create_container(public_access="blob")
            logger.info("📦 Created blob container %s", self._container_name)
        except ResourceExistsError:
            pass
        return container

    async def close(self) -> None:
        if self._service is not None:
            await run_in_threadpool(self._service.close)
        self._service = None
        self._container = None
        self._initialized = False

    async def upload(self, data: bytes, file_name: str, file_id: str, customer_id: str) -> str:
        if not self._configured:
            return await run_in_threadpool(self._save_local, data, file_name, file_id, customer_id)

        await self.initialize()
        blob_name = f"{customer_id}/{file_id}/{file_name}"
        metadata = {
            "originalName": file_name,
            "customerId": customer_id,
            "uploadDate": datetime.now(timezone.utc).isoformat(),
            "fileId": file_id,
        }
        blob = self._container.get_blob_client(blob_name)
        try:
            await run_in_threadpool(
                blob.upload_blob,
                data,
                overwrite=True,
                metadata=metadata,
                content_settings=ContentSettings(content_type=content_type_for(file_name)),
            )
        except AzureError as e:
            logger.error("❌ Blob upload failed for %s: %s", blob_name, e)
            raise IntegrationError(self.name, "blob upload failed", {"error": str(e)}) from e

        logger.info("✅ Uploaded %s (%d bytes)", blob_name, len(data))
        return blob.url

    def _save_local(self, data: bytes, file_name: str, file_id: str, customer_id: str) -> str:
        dest = safe_join(self.upload_root, customer_id, file_id, file_name)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        logger.warning("⚠️ Blob storage not configured, saved %s locally", dest)
        return f"local://cache/{file_id}"
