"""Tests for Asset Loader - tagged results, states, callbacks, all-settled join."""

import asyncio

import pytest
import trimesh

from fakes import StubBackend, car_group, lift_group
from showroom.modules.m1_scene_description import AssetDescriptor
from showroom.modules.m2_asset_loader import (
    AssetLoader,
    AssetLoadError,
    Failed,
    GltfBackend,
    Loaded,
    LoadState,
)


def _descriptors(*names):
    return [AssetDescriptor(name=n, source_path=f"{n}.glb") for n in names]


class TestAssetLoader:

    def test_await_all_settles_every_descriptor(self):
        loader = AssetLoader(StubBackend({"lift": lift_group, "car": car_group}))
        results = asyncio.run(loader.await_all(_descriptors("lift", "car")))

        assert [r.descriptor.name for r in results] == ["lift", "car"]
        assert all(isinstance(r, Loaded) for r in results)
        assert loader.pending == []
        assert set(loader.states.values()) == {LoadState.LOADED}

    def test_failure_does_not_block_others(self):
        backend = StubBackend({"lift": lift_group, "car": IOError("truncated GLB")})
        loader = AssetLoader(backend)
        results = asyncio.run(loader.await_all(_descriptors("lift", "car")))

        assert isinstance(results[0], Loaded)
        assert isinstance(results[1], Failed)
        assert loader.state("lift") is LoadState.LOADED
        assert loader.state("car") is LoadState.FAILED
        assert not any(s is LoadState.PENDING for s in loader.states.values())

    def test_failed_result_carries_descriptor_and_cause(self):
        cause = FileNotFoundError("car.glb")
        loader = AssetLoader(StubBackend({"car": cause}))
        result = asyncio.run(loader.load(_descriptors("car")[0]))

        assert not result.ok
        assert isinstance(result.error, AssetLoadError)
        assert result.error.descriptor.name == "car"
        assert result.error.cause is cause

    def test_per_asset_callbacks(self):
        loaded, failed = [], []
        loader = AssetLoader(
            StubBackend({"lift": lift_group, "car": ValueError("bad")}),
            on_loaded=lambda d, node: loaded.append((d.name, node.name)),
            on_failed=lambda d, err: failed.append(d.name),
        )
        asyncio.run(loader.await_all(_descriptors("lift", "car")))
        assert loaded == [("lift", "lift")]
        assert failed == ["car"]

    def test_all_settled_fires_once_in_descriptor_order(self):
        settled = []
        backend = StubBackend({"lift": (0.05, lift_group), "car": car_group})
        loader = AssetLoader(backend, on_all_settled=settled.append)
        asyncio.run(loader.await_all(_descriptors("lift", "car")))

        assert len(settled) == 1
        assert [r.descriptor.name for r in settled[0]] == ["lift", "car"]

    def test_completion_order_is_not_descriptor_order(self):
        order = []
        backend = StubBackend({"lift": (0.1, lift_group), "car": car_group})
        loader = AssetLoader(backend, on_loaded=lambda d, n: order.append(d.name))
        results = asyncio.run(loader.await_all(_descriptors("lift", "car")))

        assert order == ["car", "lift"]
        assert [r.descriptor.name for r in results] == ["lift", "car"]

    def test_no_retry(self):
        loader = AssetLoader(StubBackend({"car": ValueError("bad")}))
        descriptor = _descriptors("car")[0]

        async def twice():
            await loader.load(descriptor)
            await loader.load(descriptor)

        with pytest.raises(ValueError, match="already requested"):
            asyncio.run(twice())
        assert loader.state("car") is LoadState.FAILED

    def test_tracked_descriptors_start_pending(self):
        loader = AssetLoader(StubBackend({}))
        loader.track(_descriptors("lift", "car"))
        assert loader.pending == ["lift", "car"]
        assert not loader.all_settled

    def test_schedule_runs_in_background(self):
        loader = AssetLoader(StubBackend({"lift": lift_group}))

        async def go():
            tasks = loader.schedule(_descriptors("lift"))
            assert loader.state("lift") is LoadState.PENDING
            await asyncio.gather(*tasks)

        asyncio.run(go())
        assert loader.state("lift") is LoadState.LOADED


class TestGltfBackend:

    def test_missing_file_fails(self, tmp_path):
        loader = AssetLoader(GltfBackend())
        descriptor = AssetDescriptor("car", str(tmp_path / "nope.glb"))
        result = asyncio.run(loader.load(descriptor))
        assert isinstance(result, Failed)
        assert isinstance(result.error.cause, FileNotFoundError)

    def test_loads_glb_with_material_names(self, tmp_path):
        body = trimesh.creation.box(extents=(4.0, 1.0, 2.0))
        body.visual = trimesh.visual.TextureVisuals(
            material=trimesh.visual.material.PBRMaterial(
                name="CarPaint_Body", baseColorFactor=[200, 0, 0, 255],
                metallicFactor=0.5, roughnessFactor=0.3))
        glass = trimesh.creation.box(extents=(1.0, 0.5, 1.0))
        glass.apply_translation((0.0, 1.0, 0.0))
        glass.visual = trimesh.visual.TextureVisuals(
            material=trimesh.visual.material.PBRMaterial(name="Glass_Front"))
        scene = trimesh.Scene()
        scene.add_geometry(body, node_name="body")
        scene.add_geometry(glass, node_name="glass")
        path = tmp_path / "car.glb"
        path.write_bytes(scene.export(file_type="glb"))

        result = asyncio.run(AssetLoader().load(AssetDescriptor("car", str(path))))

        assert isinstance(result, Loaded)
        meshes = result.node.meshes()
        assert len(meshes) == 2
        names = sorted(m.material.name.lower() for m in meshes)
        assert any("carpaint" in n for n in names)
        assert any("glass" in n for n in names)


class TestCallbackErrors:

    def _raise(self, *args):
        raise RuntimeError("callback exploded")

    def test_raising_callbacks_do_not_escape_load(self):
        loader = AssetLoader(
            StubBackend({"lift": lift_group, "car": ValueError("bad")}),
            on_loaded=self._raise, on_failed=self._raise, on_all_settled=self._raise,
        )
        results = asyncio.run(loader.await_all(_descriptors("lift", "car")))

        assert [type(r) for r in results] == [Loaded, Failed]
        assert loader.all_settled

    def test_later_callbacks_still_fire(self):
        settled = []
        loader = AssetLoader(StubBackend({"lift": lift_group, "car": car_group}),
                             on_loaded=self._raise, on_all_settled=settled.append)
        asyncio.run(loader.await_all(_descriptors("lift", "car")))
        assert len(settled) == 1
