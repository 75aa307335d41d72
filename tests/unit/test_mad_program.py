"""
Unit tests for MAD program generation and channel expansion.
"""
import numpy as np
import pytest

from pyfastsample.sampler import filters as flt
from pyfastsample.sampler.mad_program import (
    MadInstruction,
    MadProgram,
    expand_mad_program,
    generate_mad_program,
)


def _by_target(program):
    groups = {}
    for mad in program:
        groups.setdefault(mad.target_index, []).append(mad)
    return groups


class TestMadProgramBuffer:
    """The reusable instruction buffer."""

    @pytest.mark.unit
    def test_append_and_iterate(self):
        prog = MadProgram(capacity=4)
        prog.append(0, np.array([1, 2]), np.array([0.25, 0.75]))
        prog.append(1, np.array([3]), np.array([1.0]))
        assert len(prog) == 3
        assert list(prog) == [
            MadInstruction(0, 1, 0.25),
            MadInstruction(0, 2, 0.75),
            MadInstruction(1, 3, 1.0),
        ]
        assert prog[-1] == MadInstruction(1, 3, 1.0)
        with pytest.raises(IndexError):
            prog[3]

    @pytest.mark.unit
    def test_grows_by_doubling_and_keeps_content(self):
        prog = MadProgram(capacity=2)
        for t in range(5):
            prog.append(t, np.array([t]), np.array([1.0]))
        assert prog.capacity == 8
        np.testing.assert_array_equal(prog.target_indices, np.arange(5))
        np.testing.assert_array_equal(prog.source_indices, np.arange(5))

    @pytest.mark.unit
    def test_clear_keeps_allocation(self):
        prog = MadProgram(capacity=2)
        prog.append(0, np.arange(10), np.full(10, 0.1))
        capacity = prog.capacity
        prog.clear()
        assert len(prog) == 0
        assert prog.capacity == capacity

    @pytest.mark.unit
    def test_empty_append_is_noop(self):
        prog = MadProgram()
        prog.append(0, np.array([], dtype=np.int64), np.array([]))
        assert len(prog) == 0


class TestGenerateMadProgram:
    """Instruction generation for one axis."""

    @pytest.mark.unit
    def test_box_halving(self):
        prog = generate_mad_program(2, 4, 0.0, 1.0, flt.BOX, 1.0)
        assert [(m.target_index, m.source_index) for m in prog] == [(0, 0), (0, 1), (1, 2), (1, 3)]
        np.testing.assert_allclose(prog.weights, [0.5, 0.5, 0.5, 0.5])

    @pytest.mark.unit
    def test_nearest_identity(self):
        n = 7
        prog = generate_mad_program(n, n, 0.0, 1.0, flt.NEAREST, 1.0)
        assert len(prog) == n
        np.testing.assert_array_equal(prog.target_indices, np.arange(n))
        np.testing.assert_array_equal(prog.source_indices, np.arange(n))
        np.testing.assert_array_equal(prog.weights, np.ones(n))

    @pytest.mark.unit
    def test_nearest_picks_one_sample_when_minifying(self):
        prog = generate_mad_program(4, 16, 0.0, 1.0, flt.NEAREST, 1.0)
        groups = _by_target(prog)
        assert sorted(groups) == [0, 1, 2, 3]
        for mads in groups.values():
            assert len(mads) == 1
            assert mads[0].weight == 1.0

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "kernel", [flt.BOX, flt.NEAREST, flt.GAUSSIAN, flt.HERMITE, flt.MITCHELL, flt.LANCZOS]
    )
    @pytest.mark.parametrize(
        "ntarget, nsource, left, right",
        [
            (3, 17, 0.0, 1.0),
            (17, 3, 0.0, 1.0),
            (8, 8, 0.0, 1.0),
            (1, 9, 0.0, 1.0),
            (5, 12, 0.2, 0.7),
            (20, 6, -0.1, 0.45),
            (1, 8, 0.3, 0.55),
        ],
    )
    def test_weights_sum_to_one_or_zero(self, kernel, ntarget, nsource, left, right):
        prog = generate_mad_program(ntarget, nsource, left, right, kernel, 1.0)
        sums = prog.weight_sums(ntarget)
        present = np.unique(prog.target_indices)
        np.testing.assert_allclose(sums[present], 1.0, atol=1e-5)
        absent = np.setdiff1d(np.arange(ntarget), present)
        assert np.all(sums[absent] == 0.0)

    @pytest.mark.unit
    @pytest.mark.parametrize("kernel", [flt.GAUSSIAN, flt.MITCHELL, flt.LANCZOS])
    def test_ordering(self, kernel):
        prog = generate_mad_program(9, 23, 0.1, 0.9, kernel, 1.3)
        tgt = prog.target_indices
        src = prog.source_indices
        assert np.all(np.diff(tgt) >= 0)
        same_target = np.diff(tgt) == 0
        assert np.all(np.diff(src)[same_target] > 0)

    @pytest.mark.unit
    def test_external_samples_are_rejected(self):
        prog = generate_mad_program(6, 10, 0.0, 1.0, flt.GAUSSIAN, 2.0)
        assert prog.source_indices.min() >= 0
        assert prog.source_indices.max() < 10

    @pytest.mark.unit
    def test_samples_outside_region_are_rejected(self):
        prog = generate_mad_program(4, 8, 0.25, 0.75, flt.MITCHELL, 1.0)
        assert set(prog.source_indices.tolist()) <= {2, 3, 4, 5}

    @pytest.mark.unit
    def test_nearest_crop(self):
        prog = generate_mad_program(4, 8, 0.25, 0.75, flt.NEAREST, 1.0)
        assert [(m.target_index, m.source_index, m.weight) for m in prog] == [
            (0, 2, 1.0),
            (1, 3, 1.0),
            (2, 4, 1.0),
            (3, 5, 1.0),
        ]

    @pytest.mark.unit
    def test_edge_target_is_renormalized(self):
        prog = generate_mad_program(8, 4, 0.0, 1.0, flt.GAUSSIAN, 1.0)
        first = _by_target(prog)[0]
        assert all(m.source_index >= 0 for m in first)
        assert sum(m.weight for m in first) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.unit
    def test_minify_decision_ignores_radius_multiplier(self):
        # 4 < 8 source samples: minifying, so domain scale = 4 / 4 = 1 and the
        # box footprint spans half of the row
        prog = generate_mad_program(4, 8, 0.0, 1.0, flt.BOX, 4.0)
        first = _by_target(prog)[0]
        assert [m.source_index for m in first] == [0, 1, 2, 3, 4]

    @pytest.mark.unit
    def test_window_half_width_follows_domain_scale(self):
        # Domain scale 4 / 8 = 0.5: the box covers the whole row but the
        # candidate window of target 0 stops at 0.125 * 64 + 0.5 * 64 = 40
        prog = generate_mad_program(4, 64, 0.0, 1.0, flt.BOX, 8.0)
        first = _by_target(prog)[0]
        assert [m.source_index for m in first] == list(range(41))
        np.testing.assert_allclose([m.weight for m in first], 1.0 / 41, rtol=1e-6)

    @pytest.mark.unit
    def test_window_without_radius_multiplier(self):
        prog = generate_mad_program(4, 64, 0.0, 1.0, flt.BOX, 1.0)
        first = _by_target(prog)[0]
        assert [m.source_index for m in first] == list(range(16))

    @pytest.mark.unit
    def test_radius_multiplier_widens_footprint(self):
        narrow = generate_mad_program(5, 20, 0.0, 1.0, flt.GAUSSIAN, 1.0)
        wide = generate_mad_program(5, 20, 0.0, 1.0, flt.GAUSSIAN, 2.0)
        assert len(wide) > len(narrow)

    @pytest.mark.unit
    def test_appends_to_given_program(self):
        prog = MadProgram(capacity=1)
        out = generate_mad_program(2, 4, 0.0, 1.0, flt.BOX, 1.0, prog)
        assert out is prog
        assert len(prog) == 4

    @pytest.mark.unit
    def test_region_outside_image_gives_empty_targets(self):
        prog = generate_mad_program(4, 8, 1.5, 2.0, flt.LANCZOS, 1.0)
        assert len(prog) == 0

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "args",
        [
            (0, 4, 0.0, 1.0, 1.0),
            (4, 0, 0.0, 1.0, 1.0),
            (4, 4, 0.5, 0.5, 1.0),
            (4, 4, 0.7, 0.2, 1.0),
            (4, 4, 0.0, 1.0, 0.0),
        ],
    )
    def test_invalid_arguments(self, args):
        ntarget, nsource, left, right, radius = args
        with pytest.raises(ValueError):
            generate_mad_program(ntarget, nsource, left, right, flt.BOX, radius)


class TestExpandMadProgram:
    """Channel expansion."""

    @pytest.mark.unit
    def test_single_channel_is_noop(self):
        prog = generate_mad_program(2, 4, 0.0, 1.0, flt.BOX, 1.0)
        before = list(prog)
        expand_mad_program(1, prog)
        assert list(prog) == before

    @pytest.mark.unit
    def test_three_channels(self):
        prog = MadProgram()
        prog.append(0, np.array([0, 1]), np.array([0.5, 0.5]))
        prog.append(1, np.array([2]), np.array([1.0]))
        expand_mad_program(3, prog)
        assert [(m.target_index, m.source_index, m.weight) for m in prog] == [
            (0, 0, 0.5),
            (1, 1, 0.5),
            (2, 2, 0.5),
            (0, 3, 0.5),
            (1, 4, 0.5),
            (2, 5, 0.5),
            (3, 6, 1.0),
            (4, 7, 1.0),
            (5, 8, 1.0),
        ]

    @pytest.mark.unit
    def test_expansion_keeps_per_channel_weight_sums(self):
        prog = generate_mad_program(5, 13, 0.0, 1.0, flt.LANCZOS, 1.0)
        expand_mad_program(4, prog)
        sums = prog.weight_sums(5 * 4)
        np.testing.assert_allclose(sums, 1.0, atol=1e-5)
