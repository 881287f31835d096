"""
Pydantic models for the player-count monitoring domain.

Модели ответа статус-сервиса и состояние цикла мониторинга.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Marks "no successful observation yet"; distinct from every valid count, 0 included.
UNSET: Optional[int] = None


class PlayerInfo(BaseModel):
    """Player block of a status response."""

    model_config = ConfigDict(populate_by_name=True)

    online_count: int = Field(ge=0, validation_alias="online")
    sample_names: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _collect_names(cls, data: Any) -> Any:
        # Имена приходят либо в sample[{name}], либо в list (строки или {name})
        if not isinstance(data, dict) or "sample_names" in data:
            return data
        entries = data.get("sample") or data.get("list") or []
        if not isinstance(entries, list):
            raise ValueError("player names must be a list")
        names = []
        for entry in entries:
            if isinstance(entry, dict):
                if entry.get("name"):
                    names.append(str(entry["name"]))
            elif isinstance(entry, str):
                names.append(entry)
        return {**data, "sample_names": names}


class ServerStatus(BaseModel):
    """One snapshot from the status service."""

    online: bool
    players: Optional[PlayerInfo] = None


class MonitorState(BaseModel):
    """State carried from one cycle to the next."""

    model_config = ConfigDict(frozen=True)

    last_known_count: Optional[int] = UNSET


__all__ = ["UNSET", "PlayerInfo", "ServerStatus", "MonitorState"]
