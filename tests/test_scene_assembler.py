"""Tests for Scene Assembler - transforms, normalisation, shadows, material rules."""

import math

import numpy as np
import pytest

from fakes import box_mesh, car_group
from showroom.modules.m1_scene_description import (
    AssetDescriptor,
    MaterialOverride,
    MaterialRule,
    Normalization,
    Transform,
)
from showroom.modules.m3_scene_assembler import (
    SceneAssembler,
    apply_material_rules,
    compute_bounds,
    normalization_for,
    set_base_color,
)
from showroom.shared.scene_graph import Group, Scene


def _offcenter_group():
    group = Group("model")
    group.add(box_mesh("Chunk", "Steel", extents=(10.0, 2.0, 4.0), center=(3.0, 5.0, -1.0)))
    return group


class TestAttach:

    def setup_method(self):
        self.scene = Scene()
        self.assembler = SceneAssembler()

    def test_transform_applied_exactly(self):
        t = Transform(position=(1.0, 1.65, -2.0), rotation=(0.0, math.pi / 5, 0.0),
                      scale=(1.2, 1.2, 1.2))
        node = self.assembler.attach(car_group(), AssetDescriptor("car", "car.glb", t), self.scene)

        assert np.allclose(node.position, t.position)
        assert np.allclose(node.rotation, t.rotation)
        assert np.allclose(node.scale, t.scale)
        assert node.parent is self.scene

    def test_meshes_cast_and_receive_shadows(self):
        node = self.assembler.attach(car_group(), AssetDescriptor("car", "car.glb"), self.scene)
        assert all(m.cast_shadow and m.receive_shadow for m in node.meshes())

    def test_secondary_uv_copied_when_missing(self):
        group = car_group()
        uv = np.zeros((8, 2))
        group.children[0].uv = uv
        self.assembler.attach(group, AssetDescriptor("car", "car.glb"), self.scene)
        assert group.children[0].uv2 is uv
        assert group.children[1].uv2 is None

    def test_double_attach_is_rejected(self):
        descriptor = AssetDescriptor("car", "car.glb")
        self.assembler.attach(car_group(), descriptor, self.scene)
        with pytest.raises(ValueError, match="already attached"):
            self.assembler.attach(car_group(), descriptor, self.scene)
        assert len(self.scene.children) == 1

    def test_attached_lookup(self):
        node = self.assembler.attach(car_group(), AssetDescriptor("car", "car.glb"), self.scene)
        assert self.assembler.is_attached("car")
        assert self.assembler.node("car") is node
        assert self.assembler.node("lift") is None


class TestNormalization:

    def test_normalization_for_oversized_box(self):
        bounds = (np.array([-2.0, 4.0, -3.0]), np.array([8.0, 6.0, 1.0]))
        scale, offset = normalization_for(bounds, max_size=5.0)
        assert scale == pytest.approx(0.5)
        assert np.allclose(offset, [-1.5, -2.0, 0.5])

    def test_small_model_is_only_recentred(self):
        bounds = (np.array([1.0, 1.0, 1.0]), np.array([3.0, 2.0, 2.0]))
        scale, offset = normalization_for(bounds, max_size=5.0)
        assert scale == 1.0
        assert np.allclose(offset, [-2.0, -1.0, -1.5])

    def test_attach_recentres_and_scales(self):
        scene = Scene()
        descriptor = AssetDescriptor("model", "model.glb",
                                     Transform(position=(0.0, 1.0, 0.0)),
                                     normalization=Normalization(5.0))
        node = SceneAssembler().attach(_offcenter_group(), descriptor, scene)

        # root keeps the declared transform; the pivot carries the adjustment
        assert np.allclose(node.position, (0.0, 1.0, 0.0))
        assert np.allclose(node.scale, (1.0, 1.0, 1.0))
        pivot = node.children[0]
        assert pivot.name == "model:pivot"
        assert np.allclose(pivot.scale, (0.5, 0.5, 0.5))

        low, high = compute_bounds(node)
        assert np.allclose(low, [-2.5, 1.0, -1.0])
        assert np.allclose(high, [2.5, 2.0, 1.0])

    def test_normalization_is_deterministic(self):
        def attach():
            descriptor = AssetDescriptor("model", "model.glb",
                                         normalization=Normalization(5.0))
            node = SceneAssembler().attach(_offcenter_group(), descriptor, Scene())
            return node.children[0].world_matrix()

        assert np.allclose(attach(), attach())

    def test_bounds_require_geometry(self):
        with pytest.raises(ValueError):
            compute_bounds(Group("empty"))


class TestMaterialRules:

    def test_glass_rule_on_glass_front(self):
        group = car_group()
        apply_material_rules(group, [MaterialRule.glass()])
        glass = group.find("Glass_Front").material
        assert glass.color == (0.0, 0.0, 0.0)
        assert glass.opacity == 1.0
        assert not glass.transparent
        assert glass.roughness <= 0.1
        assert glass.metalness >= 0.9

    def test_glass_independent_of_non_conflicting_order(self):
        paint = MaterialRule("carpaint", MaterialOverride(color=(1.0, 0.0, 0.0)))
        rubber = MaterialRule("rubber", MaterialOverride(roughness=0.9))
        a, b = car_group(), car_group()
        apply_material_rules(a, [MaterialRule.glass(), paint, rubber])
        apply_material_rules(b, [rubber, paint, MaterialRule.glass()])
        assert a.find("Glass_Front").material == b.find("Glass_Front").material
        assert a.find("Body").material == b.find("Body").material

    def test_last_write_wins(self):
        group = car_group()
        apply_material_rules(group, [
            MaterialRule("", MaterialOverride(roughness=0.2, metalness=0.8)),
            MaterialRule.glass(),
        ])
        assert group.find("Glass_Front").material.roughness == 0.05
        assert group.find("Body").material.roughness == 0.2

    def test_visibility_override(self):
        group = car_group()
        touched = apply_material_rules(group, [MaterialRule("rubber", MaterialOverride(visible=False))])
        assert touched == 1
        assert not group.find("Tyre").material.visible

    def test_partial_opacity_marks_transparent(self):
        group = car_group()
        apply_material_rules(group, [MaterialRule("glass", MaterialOverride(opacity=0.3))])
        assert group.find("Glass_Front").material.transparent

    def test_set_base_color_counts_matches(self):
        group = car_group()
        assert set_base_color(group, "CARPAINT", (0.0, 0.0, 1.0)) == 2
        assert group.find("Tyre").material.color == (0.5, 0.5, 0.5)
