"""Catalog entry describing one testable provider method."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

Category = Literal["wallet", "eth", "signature", "transaction", "readonly", "network"]


class TestDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_id: str  # unique within its category
    name: str
    category: Category
    method: str  # literal RPC method exercised
    description: str = ""
    fallback_message: str = "Request failed"
    result_name: Optional[str] = None  # display name in results; defaults to the method

    @property
    def label(self) -> str:
        return self.result_name or self.method

    @property
    def key(self) -> str:
        return f"{self.category}:{self.test_id}"
