"""Tests for the distributed bloom filter core."""
from bitarray import bitarray
import pytest

from distbf import (
    DistBF, IndexOutOfRange, InvalidArgument, SeedMismatch, derive_chain, estimate_parameters,
    indices_for, new_dbf, new_for_peers,
)


def test_add_and_verify_message(seed):
    """Filter for n=10 at fpr=0.1 finds an inserted element."""
    dbf = new_dbf(10, 0.1, seed)
    dbf.add(b"message")

    assert dbf.verify_element(b"message")

    indices = indices_for(b"message", dbf.chain, dbf.m)
    assert len(indices) == dbf.k
    assert all(index < dbf.m for index in indices)
    assert indices == dbf.indices_for_element(b"message")


def test_new_dbf_sizing_and_chain(seed):
    dbf = new_dbf(100, 0.1, seed)
    assert (dbf.m, dbf.k) == estimate_parameters(100, 0.1)
    assert dbf.chain == derive_chain(seed, dbf.k)
    assert dbf.count() == 0
    assert len(dbf.bit_array) == dbf.m


def test_new_dbf_uses_configured_rate(seed):
    dbf = new_dbf(100, None, seed)
    assert (dbf.m, dbf.k) == estimate_parameters(100, 0.1)


def test_new_dbf_rejects_bad_arguments(seed):
    with pytest.raises(InvalidArgument):
        new_dbf(0, 0.1, seed)
    with pytest.raises(InvalidArgument):
        new_dbf(10, 1.0, seed)


@pytest.mark.parametrize("n,fpr", [(1, 0.5), (10, 0.1), (100, 0.01), (1000, 0.001)])
def test_no_false_negatives(seed, n, fpr):
    """Every inserted element verifies, for every sizing."""
    dbf = new_dbf(n, fpr, seed)
    elements = [f"element-{i}".encode() for i in range(n)]
    for element in elements:
        dbf.add(element)
    for element in elements:
        assert dbf.verify_element(element)


def test_empty_filter_rejects_everything(seed):
    dbf = new_dbf(50, 0.1, seed)
    for i in range(50):
        assert not dbf.verify_element(f"element-{i}".encode())


def test_add_is_idempotent(seed):
    dbf = new_dbf(10, 0.1, seed)
    dbf.add(b"message")
    before = dbf.bit_array
    dbf.add(b"message")
    assert dbf.bit_array == before


def test_identical_inputs_give_identical_bits(seed):
    """Two peers with the same sizing, seed and elements build the same bits."""
    elements = [f"event-{i}".encode() for i in range(40)]
    a = new_dbf(40, 0.05, seed)
    b = new_dbf(40, 0.05, seed)
    for element in elements:
        a.add(element)
        b.add(element)

    assert a.bit_array == b.bit_array
    assert a.bit_array.tobytes() == b.bit_array.tobytes()
    assert a == b


def test_different_seeds_give_different_bits():
    elements = [f"event-{i}".encode() for i in range(40)]
    a = new_dbf(40, 0.05, b"seed-one")
    b = new_dbf(40, 0.05, b"seed-two")
    for element in elements:
        a.add(element)
        b.add(element)
    assert a.bit_array != b.bit_array


def test_proof_for_non_member(seed):
    """A non-member is disproved by its first unset index."""
    dbf = new_dbf(10, 0.1, seed)
    indices, found = dbf.proof(b"never inserted")

    assert found is False
    assert indices == [dbf.indices_for_element(b"never inserted")[0]]


def test_proof_for_member(seed):
    dbf = new_dbf(10, 0.1, seed)
    dbf.add(b"message")
    indices, found = dbf.proof(b"message")

    assert found is True
    assert len(indices) == dbf.k
    assert indices == dbf.indices_for_element(b"message")


def test_proof_disproof_points_at_unset_bit(seed):
    dbf = new_dbf(10, 0.1, seed)
    element_indices = dbf.indices_for_element(b"message")
    # Set every index but the last one
    dbf.set_indices(element_indices[:-1])
    indices, found = dbf.proof(b"message")

    if element_indices[-1] in element_indices[:-1]:
        # Last index collides with an earlier one, so all bits are set
        assert found is True
    else:
        assert found is False
        assert indices == [element_indices[-1]]
        assert not dbf.bit_array[indices[0]]


def test_verify_against_foreign_bits(seed):
    """A peer holding the same seed tests our bits for its candidates."""
    bob = new_dbf(20, 0.01, seed)
    alice = new_dbf(20, 0.01, seed)
    bob.add(b"shared")
    bob.add(b"bob-only")

    assert alice.verify_against(b"shared", bob.bit_array)
    assert alice.verify_against(b"bob-only", bob.bit_array)
    assert alice.verify_against(b"shared", bob)
    assert not alice.verify_against(b"shared", alice.bit_array)


def test_verify_against_short_foreign_array(seed):
    """A foreign array of another size is a sizing mismatch."""
    dbf = new_dbf(20, 0.01, seed)
    with pytest.raises(SeedMismatch):
        dbf.verify_against(b"message", bitarray())

    tolerant = new_dbf(20, 0.01, seed, on_seed_mismatch='warn')
    assert not tolerant.verify_against(b"message", bitarray())


def test_set_indices(seed):
    dbf = new_dbf(10, 0.1, seed)
    dbf.set_indices([5, 2, 5])
    assert dbf.get_set_bit_indices() == [2, 5]
    assert dbf.count() == 2


def test_set_indices_out_of_range_leaves_filter_unchanged(seed):
    dbf = new_dbf(10, 0.1, seed)
    with pytest.raises(IndexOutOfRange):
        dbf.set_indices([1, dbf.m])
    with pytest.raises(IndexOutOfRange):
        dbf.set_indices([-1])
    assert dbf.count() == 0


def test_set_indices_reconstructs_filter(seed):
    """Copying set bit indices into a fresh filter gives the same answers."""
    original = new_dbf(30, 0.05, seed)
    for i in range(30):
        original.add(f"element-{i}".encode())

    rebuilt = new_dbf(30, 0.05, seed)
    rebuilt.set_indices(original.get_set_bit_indices())

    assert rebuilt == original
    for i in range(30):
        assert rebuilt.verify_element(f"element-{i}".encode())


def test_seed_per_call(seed):
    """A per-call seed derives a one-off chain of the same length."""
    dbf = new_dbf(10, 0.1, seed)
    dbf.add(b"message", seed=b"other round")

    assert dbf.verify_element(b"message", seed=b"other round")
    assert dbf.indices_for_element(b"message", seed=b"other round") == indices_for(
        b"message", derive_chain(b"other round", dbf.k), dbf.m
    )
    assert dbf.indices_for_element(b"message", seed=seed) == dbf.indices_for_element(b"message")


def test_seed_matches(seed):
    dbf = new_dbf(10, 0.1, seed)
    assert dbf.seed_matches(derive_chain(seed, dbf.k))
    assert dbf.seed_matches(list(dbf.chain))
    assert not dbf.seed_matches(derive_chain(b"other", dbf.k))


def test_bit_array_is_a_copy(seed):
    dbf = new_dbf(10, 0.1, seed)
    bits = dbf.bit_array
    bits.setall(1)
    assert dbf.count() == 0


def test_with_bit_array(seed):
    bob = new_dbf(10, 0.1, seed)
    bob.add(b"message")
    alice = new_dbf(10, 0.1, seed)

    bob_view = alice.with_bit_array(bob.bit_array)
    assert bob_view == bob
    assert bob_view.verify_element(b"message")
    assert alice.count() == 0

    with pytest.raises(InvalidArgument):
        alice.with_bit_array(bitarray('101'))


def test_new_for_peers(seed):
    dbf = new_for_peers(100, 101, seed)
    assert (dbf.m, dbf.k) == (485, 4)
    assert dbf.chain == derive_chain(seed, 4)


def test_constructor_validation(seed):
    chain = derive_chain(seed, 3)
    with pytest.raises(InvalidArgument):
        DistBF(0, 3, chain)
    with pytest.raises(InvalidArgument):
        DistBF(10, 0, ())
    with pytest.raises(InvalidArgument):
        DistBF(10, 4, chain)
    with pytest.raises(InvalidArgument):
        DistBF(10, 1, [b"short"])


def test_repr(seed):
    dbf = new_dbf(10, 0.1, seed)
    dbf.add(b"message")
    assert repr(dbf).startswith(f"DistBF(m={dbf.m}, k={dbf.k}")


def test_on_seed_mismatch_validated(seed):
    with pytest.raises(InvalidArgument):
        new_dbf(10, 0.1, seed, on_seed_mismatch='ignore')


def test_with_bit_array_keeps_mismatch_mode(seed):
    tolerant = new_dbf(10, 0.1, seed, on_seed_mismatch='warn')
    assert tolerant.with_bit_array(tolerant.bit_array).on_seed_mismatch == 'warn'


def test_new_dbf_rejects_rate_needing_too_many_hashes(seed):
    """Sizing fails before the chain is derived when k would exceed 256."""
    with pytest.raises(InvalidArgument, match="hash functions"):
        new_dbf(1, 1e-80, seed)


def test_get_set_bit_indices_matches_bits(seed):
    dbf = new_dbf(200, 0.01, seed)
    for i in range(200):
        dbf.add(f"element-{i}".encode())
    bits = dbf.bit_array
    assert dbf.get_set_bit_indices() == [i for i in range(dbf.m) if bits[i]]
    assert len(dbf.get_set_bit_indices()) == dbf.count()
