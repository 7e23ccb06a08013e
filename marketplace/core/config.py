from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .records import ZERO_ADDRESS


def _address_field(name: str, volta_key: str):
    # contract-address JSON files shipped with the front end use VOLTA_* keys
    return Field(
        ZERO_ADDRESS,
        min_length=1,
        validation_alias=AliasChoices(f"MARKETPLACE_{name.upper()}", volta_key),
    )


class MarketplaceConfig(BaseSettings):
    """Process-wide network settings, read once and handed to gateway factories.

    Values come from ``MARKETPLACE_*`` environment variables (or a ``.env``
    file); ``from_json`` reads a contract-address file instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKETPLACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    identity_manager_address: str = _address_field("identity_manager_address", "VOLTA_IDENTITY_MANAGER_ADDRESS")
    marketplace_address: str = _address_field("marketplace_address", "VOLTA_MARKETPLACE_ADDRESS")
    aggregator_address: str = _address_field("aggregator_address", "AGGREGATOR_ADDRESS")
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "MarketplaceConfig":
        with open(path, "r", encoding="utf-8") as fh:
            return cls.model_validate(json.load(fh))
