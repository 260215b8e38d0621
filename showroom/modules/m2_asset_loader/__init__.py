"""
#WHERE
    Imported by session.py, main.py and test_asset_loader.py.

#WHAT
    Asset Loader Module (Module 2) — asynchronous GLB loading (trimesh on a
    worker thread) returning tagged Loaded/Failed results, tracking
    per-descriptor LoadState, with per-asset callbacks and an all-settled
    join used to gate the first frame.

#INPUT
    AssetDescriptor list from M1.

#OUTPUT
    Loaded(node) / Failed(error) per descriptor; scene graph roots for M3.
"""

from .backends import AssetBackend, GltfBackend, material_from_visual
from .loader import AssetLoader
from .models import AssetLoadError, Failed, Loaded, LoadResult, LoadState

__all__ = [
    "AssetBackend", "GltfBackend", "material_from_visual",
    "AssetLoader",
    "AssetLoadError", "Failed", "Loaded", "LoadResult", "LoadState",
]
