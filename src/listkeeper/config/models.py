"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``listkeeper.toml`` only holds
overrides.  An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from listkeeper.domain.types import EntrySource


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    path: str = ".listkeeper/lists.db"


class DomainsConfig(BaseModel):
    """[domains] section.

    ``include_private_suffixes`` treats private public-suffix entries
    (``blogspot.com``, ``github.io``...) as suffixes, so ``alice.github.io``
    becomes a registrable domain of its own.
    """

    model_config = {"frozen": True}

    include_private_suffixes: bool = False


class TransferConfig(BaseModel):
    """[transfer] section."""

    model_config = {"frozen": True}

    import_source: EntrySource = EntrySource.USER


class ListkeeperConfig(BaseModel):
    """Root of ``listkeeper.toml``."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    domains: DomainsConfig = Field(default_factory=DomainsConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)
