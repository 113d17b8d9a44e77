"""Tests for the global filter configuration."""
import pytest

from distbf import FilterConfig, InvalidArgument, get_filter_config, new_dbf, reset_filter_config, set_filter_config
from distbf.params import estimate_parameters


def test_defaults():
    assert get_filter_config().false_positive_rate == 0.1


def test_set_and_reset(seed):
    set_filter_config(FilterConfig(false_positive_rate=0.001))
    dbf = new_dbf(100, None, seed)
    assert (dbf.m, dbf.k) == estimate_parameters(100, 0.001)

    reset_filter_config()
    assert get_filter_config() == FilterConfig()


@pytest.mark.parametrize("fpr", [0.0, 1.0, -0.5])
def test_rejects_bad_default_rate(fpr):
    with pytest.raises(InvalidArgument):
        set_filter_config(FilterConfig(false_positive_rate=fpr))
    assert get_filter_config().false_positive_rate == 0.1


def test_config_has_no_mismatch_switch(seed):
    """Seed-mismatch handling lives on each filter, not in process config."""
    assert not hasattr(FilterConfig(), 'seed_mismatch')
    assert new_dbf(10, None, seed).on_seed_mismatch == 'raise'
