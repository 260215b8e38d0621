"""Tests for Session - lifecycle, readiness gates, failure tolerance."""

import asyncio

import pytest

from fakes import FakeRenderer, StubBackend, car_group, lift_group
from showroom.modules.m1_scene_description import (
    get_profile,
    showroom_profile,
    workshop_profile,
)
from showroom.modules.m2_asset_loader import Failed, Loaded, LoadState
from showroom.session import Session, SessionConfig, SessionState
from showroom.shared import constants as C
from showroom.shared.scene_graph import DirectionalLight, Surface


def _session(description, plan=None, renderer=None, surface=None, **config):
    plan = plan if plan is not None else {"lift": lift_group, "car": car_group}
    return Session(description, surface or Surface(320, 240),
                   SessionConfig(realtime=False, **config),
                   renderer=renderer or FakeRenderer(),
                   backend=StubBackend(plan))


class TestBuild:

    def test_missing_surface_aborts(self):
        session = Session(workshop_profile(), None, renderer=FakeRenderer())
        assert session.build() is False
        assert session.state is SessionState.UNINITIALIZED
        assert session.renderer.frames == 0

    def test_missing_surface_run_renders_nothing(self):
        session = Session(workshop_profile(), None, renderer=FakeRenderer())
        assert asyncio.run(session.run(max_frames=3)) == 0

    def test_renderer_failure_sets_status(self):
        surface = Surface(320, 240)
        session = _session(workshop_profile(), renderer=FakeRenderer(setup_ok=False),
                           surface=surface)
        assert session.build() is False
        assert surface.status_text and "renderer" in surface.status_text
        assert session.state is SessionState.UNINITIALIZED

    def test_static_scene(self):
        session = _session(workshop_profile())
        assert session.build()
        assert session.state is SessionState.SCENE_BUILT
        assert [m.name for m in session.scene.meshes()] == ["floor", "wall"]
        key = [l for l in session.scene.lights() if isinstance(l, DirectionalLight)][0]
        assert key.cast_shadow and key.shadow_map_size == 2048
        assert session.scene.fog is not None
        assert session.camera.aspect == pytest.approx(320 / 240)

    def test_build_twice_raises(self):
        session = _session(workshop_profile())
        session.build()
        with pytest.raises(RuntimeError):
            session.build()

    def test_sessions_are_independent(self):
        a = _session(workshop_profile())
        b = _session(workshop_profile())
        a.build()
        b.build()
        a.bridge.on_resize(100, 100)
        assert b.camera.aspect == pytest.approx(320 / 240)
        assert a.scene is not b.scene


class TestReadyGate:

    def test_gated_first_frame_sees_every_asset(self):
        session = _session(workshop_profile())
        count = asyncio.run(session.run(max_frames=3))

        assert count == 3
        assert session.state is SessionState.RUNNING
        # floor + wall + lift platform + 4 car parts
        assert session.renderer.mesh_counts[0] == 7
        assert all(isinstance(r, Loaded) for r in session.results)

    def test_gated_renders_even_if_asset_fails(self):
        plan = {"lift": lift_group, "car": FileNotFoundError("porche.glb")}
        session = _session(workshop_profile(), plan)
        asyncio.run(session.run(max_frames=2))

        assert session.renderer.frames == 2
        assert session.renderer.mesh_counts[0] == 3
        assert isinstance(session.results[1], Failed)
        assert session.loader.state("car") is LoadState.FAILED

    def test_raising_settled_callback_still_starts_rendering(self):
        session = _session(workshop_profile())
        session.loader.on_all_settled = (
            lambda results: session.bridge.on_color_select("carpaint", "bogus"))
        count = asyncio.run(session.run(max_frames=2))

        assert count == 2
        assert session.state is SessionState.RUNNING
        assert session.renderer.mesh_counts[0] == 7

    def test_eager_renders_before_slow_asset(self):
        plan = {"lift": lift_group, "car": (0.2, car_group)}
        session = _session(showroom_profile(), plan)
        asyncio.run(session.run(max_frames=3))

        # first frame precedes any load; only the floor exists
        assert session.renderer.mesh_counts[0] == 1
        assert session.assembler.is_attached("car")
        assert session.loader.all_settled

    def test_eager_missing_car_keeps_rendering(self):
        plan = {"lift": lift_group, "car": FileNotFoundError("aventador.glb")}
        session = _session(showroom_profile(), plan)
        count = asyncio.run(session.run(max_frames=5))

        assert count == 5
        assert session.assembler.is_attached("lift")
        assert not session.assembler.is_attached("car")
        assert [type(r) for r in session.results] == [Loaded, Failed]

    def test_frames_kept_in_memory(self):
        session = _session(workshop_profile(), keep_frames=None)
        asyncio.run(session.run(max_frames=4))
        assert session.memory.count == 4
        assert session.last_frame is not None

    def test_run_twice_raises(self):
        session = _session(workshop_profile())
        asyncio.run(session.run(max_frames=1))
        with pytest.raises(RuntimeError):
            asyncio.run(session.run(max_frames=1))


class TestLift:

    def test_fixed_lift_does_not_move(self):
        session = _session(showroom_profile())
        asyncio.run(session.run(max_frames=2))
        car = session.assembler.node("car")
        assert car.position[1] == pytest.approx(C.CAR_BASE_Y + C.FIXED_LIFT_HEIGHT)
        assert session.render_loop.on_frame is None

    def test_animated_lift_raises_lift_and_car(self):
        session = _session(get_profile("showroom-animated"))
        asyncio.run(session.run(max_frames=1))
        lift = session.assembler.node("lift")
        car = session.assembler.node("car")

        session.render_loop.on_frame(4.0)
        assert lift.position[1] == pytest.approx(C.LIFT_BASE_Y + C.FIXED_LIFT_HEIGHT)
        assert car.position[1] == pytest.approx(C.CAR_BASE_Y + C.FIXED_LIFT_HEIGHT)

        session.render_loop.on_frame(8.0)
        assert car.position[1] == pytest.approx(C.CAR_BASE_Y, abs=1e-9)


class TestClose:

    def test_close_releases_renderer(self):
        session = _session(workshop_profile())
        asyncio.run(session.run(max_frames=1))
        session.close()
        assert session.renderer.closed
