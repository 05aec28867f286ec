"""Wire format of events relayed between workers over Redis Pub/Sub."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class FanoutEnvelope(BaseModel):
    event: str
    user_ids: list[str]
    payload: Any = None

    def encode(self) -> str:
        return self.model_dump_json()

    @classmethod
    def decode(cls, raw: str | bytes) -> FanoutEnvelope:
        return cls.model_validate_json(raw)
