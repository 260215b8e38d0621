"""
#WHERE
    Used by loader.py, backends.py, session.py and test_asset_loader.py.

#WHAT
    Load-state enum, the AssetLoadError failure type and the tagged
    Loaded/Failed result variant returned by every load.

#INPUT
    AssetDescriptor from M1, loaded scene graph root or the underlying cause.

#OUTPUT
    LoadState, AssetLoadError, Loaded, Failed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from showroom.modules.m1_scene_description.models import AssetDescriptor
from showroom.shared.scene_graph import Group


class LoadState(Enum):
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


class AssetLoadError(Exception):
    """Source path unreachable or unparseable."""

    def __init__(self, descriptor: AssetDescriptor, cause: BaseException):
        super().__init__(f"Failed to load '{descriptor.name}' from "
                         f"{descriptor.source_path}: {cause}")
        self.descriptor = descriptor
        self.cause = cause


@dataclass(slots=True)
class Loaded:
    descriptor: AssetDescriptor
    node: Group
    ok: bool = True

    @property
    def state(self) -> LoadState:
        return LoadState.LOADED


@dataclass(slots=True)
class Failed:
    descriptor: AssetDescriptor
    error: AssetLoadError
    ok: bool = False

    @property
    def state(self) -> LoadState:
        return LoadState.FAILED


LoadResult = Union[Loaded, Failed]
