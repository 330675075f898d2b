"""Tests for threaded LOD tier extraction."""
import numpy as np
import pytest

from rtin_terrain.errors import InvalidDimensions
from rtin_terrain.world.error_field import ErrorField
from rtin_terrain.world.height import HeightField
from rtin_terrain.world.lod import LodBuilder, build_lod_tiers
from rtin_terrain.world.rtin import RtinExtractor


TIERS = [0.0, 0.05, 0.2, float("inf")]


@pytest.mark.parametrize("workers", [1, 3])
def test_tiers_match_direct_extraction(rough17, workers):
    tiers = build_lod_tiers(rough17, TIERS, workers=workers)
    assert list(tiers) == TIERS
    extractor = RtinExtractor(rough17)
    for max_error, mesh in tiers.items():
        direct = extractor.extract(max_error)
        np.testing.assert_array_equal(mesh.triangles, direct.triangles)
        np.testing.assert_array_equal(mesh.vertices, direct.vertices)
        np.testing.assert_array_equal(mesh.normals, direct.normals)


def test_tier_sizes_shrink(rough17):
    tiers = build_lod_tiers(rough17, TIERS)
    counts = [m.num_triangles for m in tiers.values()]
    assert counts == sorted(counts, reverse=True)
    assert counts[-1] == 2


def test_builder_is_reusable_and_shares_error_field(rough17):
    ef = ErrorField.build(rough17)
    with LodBuilder(rough17, workers=2, error_field=ef) as builder:
        assert builder.extractor.error_field is ef
        first = builder.build([0.1])
        second = builder.build([0.1, 0.3])
    np.testing.assert_array_equal(first[0.1].triangles, second[0.1].triangles)


def test_worker_failure_is_raised(rough17):
    with LodBuilder(rough17, workers=2) as builder:
        with pytest.raises(ValueError):
            builder.build([0.1, -1.0])
        # the builder keeps working after a failed request
        assert builder.build([0.1])[0.1].num_triangles > 2


def test_shutdown_stops_workers(rough17):
    builder = LodBuilder(rough17, workers=2)
    builder.shutdown()
    assert not any(w.is_alive() for w in builder.workers)


def test_invalid_dimensions():
    with pytest.raises(InvalidDimensions):
        build_lod_tiers(HeightField(np.zeros((6, 6))), [0.1])
