import pytest
from vpal import target as target_mod
from vpal.target import Target, DEFAULT_TARGETS, TARGETS_BY_NAME


def test_default_target_values():
    t = Target()
    assert t.saturation_targets == [0.0, 0.5, 1.0]
    assert t.lightness_targets == [0.0, 0.5, 1.0]
    assert t.weights == [0.24, 0.52, 0.24]
    assert t.is_exclusive()
    assert t.name is None


def test_canonical_targets():
    assert [t.name for t in DEFAULT_TARGETS] == [
        "light_vibrant", "vibrant", "dark_vibrant", "light_muted", "muted", "dark_muted"]
    assert TARGETS_BY_NAME["vibrant"] is target_mod.VIBRANT

    lv = target_mod.LIGHT_VIBRANT
    assert (lv.minimum_lightness, lv.target_lightness, lv.maximum_lightness) == (0.55, 0.74, 1.0)
    assert (lv.minimum_saturation, lv.target_saturation, lv.maximum_saturation) == (0.35, 1.0, 1.0)

    v = target_mod.VIBRANT
    assert (v.minimum_lightness, v.target_lightness, v.maximum_lightness) == (0.3, 0.5, 0.7)

    dv = target_mod.DARK_VIBRANT
    assert (dv.minimum_lightness, dv.target_lightness, dv.maximum_lightness) == (0.0, 0.26, 0.45)

    m = target_mod.MUTED
    assert (m.minimum_saturation, m.target_saturation, m.maximum_saturation) == (0.0, 0.3, 0.4)

    for t in DEFAULT_TARGETS:
        assert t.is_exclusive()


def test_normalize_weights_is_idempotent():
    t = Target(saturation_weight=1, lightness_weight=3, population_weight=0)
    t.normalize_weights()
    assert t.weights == [0.25, 0.75, 0]
    t.normalize_weights()
    assert t.weights == [0.25, 0.75, 0]


def test_normalize_leaves_zero_and_negative_weights():
    t = Target(saturation_weight=0, lightness_weight=0, population_weight=0)
    t.normalize_weights()
    assert t.weights == [0, 0, 0]

    t = Target(saturation_weight=-1, lightness_weight=2, population_weight=2)
    t.normalize_weights()
    assert t.weights == [-1, 0.5, 0.5]


def test_copy_overrides_and_drops_identity():
    source = target_mod.VIBRANT
    copied = source.copy(target_lightness=0.6)
    assert copied is not source
    assert copied.target_lightness == 0.6
    assert copied.minimum_lightness == source.minimum_lightness
    assert copied.minimum_saturation == source.minimum_saturation
    assert copied.weights == source.weights
    assert copied.name is None

    non_exclusive = Target(exclusive=False)
    assert not non_exclusive.is_exclusive()
    assert non_exclusive.copy().is_exclusive()


def test_copy_does_not_share_lists():
    source = Target(saturation_weight=2, lightness_weight=2, population_weight=0)
    copied = source.copy()
    copied.normalize_weights()
    assert source.weights == [2, 2, 0]
    assert copied.weights == [0.5, 0.5, 0]


@pytest.mark.parametrize("t", DEFAULT_TARGETS, ids=lambda t: t.name)
def test_canonical_ranges_are_ordered(t):
    assert t.minimum_saturation <= t.target_saturation <= t.maximum_saturation
    assert t.minimum_lightness <= t.target_lightness <= t.maximum_lightness
