"""Taichi runtime initialisation.

The renderer's worker pool is Taichi's CPU thread pool: the outermost loop
of the render kernel is split across its threads. init_runtime() fixes the
pool size and backend once, before any module declaring Taichi fields is
imported (ti.init() discards previously declared fields).

Example:
    >>> from rtweekend.core.runtime import init_runtime
    >>> init_runtime(num_threads=8)
    >>> from rtweekend.core.scheduler import render  # safe to import now
"""

from __future__ import annotations

import logging
import os

import taichi as ti

logger = logging.getLogger(__name__)

_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


def init_runtime(
    num_threads: int | None = None,
    *,
    arch: str = "cpu",
    debug: bool = False,
) -> None:
    """Initialise Taichi for rendering.

    Args:
        num_threads: Size of the CPU worker pool. None uses one thread per
            available core.
        arch: Backend name ("cpu", "gpu", "cuda", "vulkan" or "metal").
        debug: Enable Taichi's debug mode (bounds checks in kernels).

    Raises:
        ValueError: If num_threads is not positive or arch is unknown.
    """
    if num_threads is not None and num_threads < 1:
        raise ValueError(f"num_threads must be positive, got {num_threads}")
    if arch not in _ARCHES:
        raise ValueError(f"Unknown arch {arch!r}; expected one of {sorted(_ARCHES)}")

    threads = num_threads if num_threads is not None else (os.cpu_count() or 1)
    ti.init(
        arch=_ARCHES[arch],
        cpu_max_num_threads=threads,
        default_fp=ti.f32,
        debug=debug,
    )
    logger.info("Taichi runtime initialised (arch=%s, threads=%d)", arch, threads)
