# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Database interface consumed by the snapshot pipeline.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

Document = Dict[str, Any]


@dataclass
class ReplaceResult:
    """Counts reported by a collection replacement."""

    deleted_count: int
    inserted_count: int


class DocumentDatabase(Protocol):
    """
    The four database operations a snapshot needs, plus close().

    Documents are opaque mappings; the pipeline never looks inside them.
    """

    async def list_collection_names(self) -> List[str]: ...

    async def find_all(self, collection: str) -> List[Document]: ...

    async def replace_collection(
        self,
        collection: str,
        documents: List[Document],
        transactional: bool = False,
    ) -> ReplaceResult: ...

    async def close(self) -> None: ...
