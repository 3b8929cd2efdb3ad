"""Tests for the Lambertian (diffuse) material.

Tests cover:
- Scattered directions are unit length and leave the surface
- Attenuation equals the albedo
- The random state advances
- Material registry validation
"""

import numpy as np
import pytest
import taichi as ti

N = 2048


class TestScatterLambertian:
    """Tests for scatter_lambertian."""

    def test_directions_unit_and_above_surface(self):
        from rtweekend.core.rng import row_seeds
        from rtweekend.materials.lambertian import scatter_lambertian, vec3

        states = ti.field(dtype=ti.u32, shape=N)
        states.from_numpy(row_seeds(0, N))
        directions = ti.Vector.field(3, dtype=ti.f32, shape=N)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            albedo = vec3(0.2, 0.4, 0.6)
            for i in range(N):
                d, a, _ = scatter_lambertian(albedo, normal, states[i])
                directions[i] = d
                attenuations[i] = a

        test_kernel()
        d = directions.to_numpy()
        a = attenuations.to_numpy()

        assert np.all(np.abs(np.linalg.norm(d, axis=1) - 1.0) < 1e-5)
        assert np.all(d[:, 1] >= -1e-6)
        assert np.allclose(a, [0.2, 0.4, 0.6], atol=1e-6)

    def test_cosine_weighted_distribution(self):
        """normal + unit vector gives E[cos theta] = 2/3."""
        from rtweekend.core.rng import row_seeds
        from rtweekend.materials.lambertian import scatter_lambertian, vec3

        states = ti.field(dtype=ti.u32, shape=N)
        states.from_numpy(row_seeds(1, N))
        cosines = ti.field(dtype=ti.f32, shape=N)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(N):
                d, _, _ = scatter_lambertian(vec3(1.0, 1.0, 1.0), normal, states[i])
                cosines[i] = d.z

        test_kernel()
        assert abs(cosines.to_numpy().mean() - 2.0 / 3.0) < 0.03

    def test_state_advances(self):
        from rtweekend.materials.lambertian import scatter_lambertian, vec3

        new_state = ti.field(dtype=ti.u32, shape=())

        @ti.kernel
        def test_kernel(seed: ti.u32):
            _, _, s = scatter_lambertian(vec3(0.5, 0.5, 0.5), vec3(0.0, 1.0, 0.0), seed)
            new_state[None] = s

        test_kernel(2463534242)
        assert new_state[None] != 2463534242


class TestLambertianRegistry:
    """Tests for the Lambertian material table."""

    def test_add_and_read_back(self):
        from rtweekend.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
            get_lambertian_material_count,
        )

        first = add_lambertian_material((0.1, 0.2, 0.3))
        second = add_lambertian_material((0.7, 0.8, 0.9))
        assert (first, second) == (0, 1)
        assert get_lambertian_material_count() == 2

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_lambertian_albedo(1)

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [0.7, 0.8, 0.9], atol=1e-6)

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_rejects_out_of_range_albedo(self, albedo):
        from rtweekend.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError, match="outside \\[0, 1\\]"):
            add_lambertian_material(albedo)
