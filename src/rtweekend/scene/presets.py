"""Ready-made scenes.

Each function clears the active scene, fills it and returns its
SceneManager. Pair them with the camera presets in
rtweekend.camera.thin_lens: default_camera() frames the small scenes,
cover_camera() the random-spheres scene and dof_camera() the
dielectric-spheres scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.scene.presets import four_spheres_scene
    >>> scene = four_spheres_scene()
    >>> scene.get_sphere_count()
    4
"""

import math

import numpy as np

from rtweekend.scene.manager import SceneManager

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
GROUND_ALBEDO = (0.8, 0.8, 0.0)


def two_spheres_scene() -> SceneManager:
    """A diffuse sphere resting on a large diffuse ground sphere."""
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    return scene


def four_spheres_scene() -> SceneManager:
    """A diffuse sphere flanked by two fuzzy metal spheres."""
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.8)
    scene.add_metal_sphere((-1.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.8), fuzz=0.3)
    return scene


def dielectric_spheres_scene(left_radius: float = 0.5) -> SceneManager:
    """Glass, diffuse and metal spheres in a row.

    Args:
        left_radius: Radius of the glass sphere on the left. A negative
            value turns it into an inside-out shell; adding a second glass
            sphere of the opposite sign makes a hollow bubble.
    """
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.1, 0.2, 0.5))
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.0)
    scene.add_dielectric_sphere((-1.0, 0.0, -1.0), left_radius, ior=1.5)
    return scene


def hollow_glass_scene() -> SceneManager:
    """The dielectric-spheres scene with the glass sphere made hollow."""
    scene = dielectric_spheres_scene(left_radius=0.5)
    scene.add_dielectric_sphere((-1.0, 0.0, -1.0), -0.45, ior=1.5)
    return scene


def blue_red_scene() -> SceneManager:
    """Two touching spheres that exactly fill a 90 degree field of view."""
    r = math.cos(math.pi / 4.0)
    scene = SceneManager()
    scene.add_lambertian_sphere((-r, 0.0, -1.0), r, (0.0, 0.0, 1.0))
    scene.add_lambertian_sphere((r, 0.0, -1.0), r, (1.0, 0.0, 0.0))
    return scene


def random_spheres_scene(seed: int = 0) -> SceneManager:
    """Hundreds of small random spheres around three large ones.

    Small spheres sit on a 22 x 22 grid with jittered centers; 80% are
    diffuse, 15% metal and 5% glass. Grid cells too close to the large
    metal sphere are left empty.

    Args:
        seed: Seed for numpy's generator; equal seeds build equal scenes.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, -1000.0, -1.0), 1000.0, (0.5, 0.5, 0.5))

    feature_center = np.array([4.0, 0.2, 0.0])

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])
            if np.linalg.norm(center - feature_center) < 0.9:
                continue

            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center_tuple, 0.2, tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = rng.uniform(0.0, 5.0)
                scene.add_metal_sphere(center_tuple, 0.2, tuple(albedo.tolist()), fuzz=fuzz)
            else:
                scene.add_dielectric_sphere(center_tuple, 0.2, ior=1.5)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, ior=1.5)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), fuzz=0.0)
    return scene


PRESETS = {
    "two_spheres": two_spheres_scene,
    "four_spheres": four_spheres_scene,
    "dielectric_spheres": dielectric_spheres_scene,
    "hollow_glass": hollow_glass_scene,
    "blue_red": blue_red_scene,
    "random_spheres": random_spheres_scene,
}
