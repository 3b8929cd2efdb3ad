"""Tests for runtime initialization arguments.

init_runtime() itself runs once in conftest; these tests only cover the
argument checks, which fail before Taichi is touched.
"""

import pytest


class TestInitRuntime:
    """Tests for init_runtime argument validation."""

    @pytest.mark.parametrize("num_threads", [0, -2])
    def test_rejects_non_positive_thread_count(self, num_threads):
        from rtweekend.core.runtime import init_runtime

        with pytest.raises(ValueError, match="num_threads"):
            init_runtime(num_threads=num_threads)

    def test_rejects_unknown_arch(self):
        from rtweekend.core.runtime import init_runtime

        with pytest.raises(ValueError, match="Unknown arch"):
            init_runtime(arch="tpu")
