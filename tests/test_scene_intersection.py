"""Tests for scene-level intersection.

Tests cover:
- Closest-hit selection among overlapping spheres
- Removing spheres and hitting what was behind them
- Rays passing between spheres
- Material ids carried into the hit record
- Capacity and index errors
"""

import pytest
import taichi as ti


def _intersect(origin, direction):
    from rtweekend.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3):
        record = intersect_scene(o, d, 0.001, 1e10)
        hit[None] = record.hit
        t_val[None] = record.t
        material_id[None] = record.material_id
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction))
    return hit[None], t_val[None], material_id[None], front_face[None]


class TestSceneStorage:
    """Tests for adding and removing spheres."""

    def test_add_and_count(self):
        from rtweekend.scene.intersection import add_sphere, get_sphere_count, vec3

        assert get_sphere_count() == 0
        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0) == 0
        assert add_sphere(vec3(1.0, 0.0, -1.0), 0.5, 1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        from rtweekend.scene.intersection import add_sphere, clear_scene, get_sphere_count, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        clear_scene()
        assert get_sphere_count() == 0

    def test_remove_keeps_order(self):
        from rtweekend.scene.intersection import (
            add_sphere,
            get_sphere_count,
            remove_sphere,
            sphere_material_ids,
            sphere_radii,
            vec3,
        )

        for i in range(4):
            add_sphere(vec3(float(i), 0.0, -1.0), 0.1 * (i + 1), i)

        remove_sphere(1)

        assert get_sphere_count() == 3
        assert [sphere_material_ids[i] for i in range(3)] == [0, 2, 3]
        assert abs(sphere_radii[1] - 0.3) < 1e-6

    @pytest.mark.parametrize("index", [-1, 1])
    def test_remove_out_of_range(self, index):
        from rtweekend.scene.intersection import add_sphere, remove_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        with pytest.raises(IndexError):
            remove_sphere(index)

    def test_capacity(self):
        from rtweekend.scene.intersection import MAX_SPHERES, add_sphere, vec3

        for _ in range(MAX_SPHERES):
            add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)


class TestIntersectScene:
    """Tests for the nearest-hit search."""

    def test_empty_scene_misses(self):
        hit, _, material_id, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    def test_closest_hit_among_overlapping(self):
        """The record with the smaller t wins whatever the scene order."""
        from rtweekend.scene.intersection import add_sphere, vec3

        # Far sphere first, overlapping near sphere second
        add_sphere(vec3(0.0, 0.0, -3.0), 1.0, 7)
        add_sphere(vec3(0.0, 0.0, -2.5), 1.0, 9)

        hit, t, material_id, front_face = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 9
        assert front_face == 1

    def test_removing_near_sphere_reveals_far_one(self):
        from rtweekend.scene.intersection import add_sphere, remove_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, 0)
        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, 1)

        hit, t, material_id, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 0

        remove_sphere(0)

        hit, t, material_id, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 4.5) < 1e-5
        assert material_id == 1

    def test_ray_between_spheres_misses(self):
        from rtweekend.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, 0)
        add_sphere(vec3(0.0, 0.0, -5.0), 0.5, 1)

        hit, _, _, _ = _intersect((0.0, 0.0, -3.5), (1.0, 0.0, 0.0))
        assert hit == 0

    def test_hollow_shell_inner_wall(self):
        """Inside a glass shell the inner negative sphere is hit first."""
        from rtweekend.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, 0)
        add_sphere(vec3(0.0, 0.0, -1.0), -0.45, 1)

        hit, t, material_id, front_face = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert material_id == 0
        assert front_face == 1

        # Starting between the two walls, the inner wall is next
        hit, t, material_id, front_face = _intersect((0.0, 0.0, -0.52), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 0.03) < 1e-4
        assert material_id == 1
        assert front_face == 0
