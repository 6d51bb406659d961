# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
MongoDB adapter built on pymongo's asyncio client.

replace_collection() deletes every document and bulk-inserts the
replacement set. Outside a transaction these are two independent writes:
if the insert fails, the collection stays empty.
"""

from typing import Any, List

import structlog
from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import PyMongoError

from mongosnap.config import SnapshotConfig
from mongosnap.database.base import Document, ReplaceResult
from mongosnap.exceptions import DatabaseConnectionError

logger = structlog.get_logger()

# pymongo waits 30s by default
SERVER_SELECTION_TIMEOUT_MS = 10_000


class MongoDocumentDatabase:
    """DocumentDatabase over one AsyncMongoClient and one database."""

    def __init__(self, client: Any, database: Any) -> None:
        self.client = client
        self.database = database
        self._closed = False

    @property
    def name(self) -> str:
        return self.database.name

    async def list_collection_names(self) -> List[str]:
        # Real collections only, views are skipped
        return await self.database.list_collection_names(filter={"type": "collection"})

    async def find_all(self, collection: str) -> List[Document]:
        cursor = self.database[collection].find({})
        return await cursor.to_list(None)

    async def replace_collection(
        self,
        collection: str,
        documents: List[Document],
        transactional: bool = False,
    ) -> ReplaceResult:
        target = self.database[collection]

        if not transactional:
            deleted = await target.delete_many({})
            inserted = await target.insert_many(documents)
            return ReplaceResult(
                deleted_count=deleted.deleted_count,
                inserted_count=len(inserted.inserted_ids),
            )

        # One attempt: the transaction commits on exit or aborts on error
        async with self.client.start_session() as session:
            async with await session.start_transaction():
                deleted = await target.delete_many({}, session=session)
                inserted = await target.insert_many(documents, session=session)
        return ReplaceResult(
            deleted_count=deleted.deleted_count,
            inserted_count=len(inserted.inserted_ids),
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.client.close()
        logger.debug("database_connection_closed", database=self.name)


async def connect_database(config: SnapshotConfig) -> MongoDocumentDatabase:
    """
    Open a MongoDB connection and verify it with a ping.

    Args:
        config: Snapshot configuration

    Returns:
        Connected MongoDocumentDatabase

    Raises:
        DatabaseConnectionError: If the server is unreachable, the URL is
            invalid, or no database name can be determined
    """
    try:
        client = AsyncMongoClient(
            config.database_url,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
    except (PyMongoConfigurationError, ValueError) as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    try:
        if config.database_name:
            database = client[config.database_name]
        else:
            database = client.get_default_database()
        await client.admin.command("ping")
    except PyMongoConfigurationError as e:
        await client.close()
        raise DatabaseConnectionError(
            "No database name in URL; set database_name (MONGOSNAP_DATABASE)",
        ) from e
    except PyMongoError as e:
        await client.close()
        raise DatabaseConnectionError(
            f"Database unreachable: {e}",
        ) from e

    logger.info("database_connected", database=database.name)
    return MongoDocumentDatabase(client, database)
