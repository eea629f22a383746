from __future__ import annotations

from xer2.lcg import MASK64, MMIX_INCREMENT, SEED_FUSE, MmixLcg


def test_mmix_lcg_sequence_from_zero() -> None:
    lcg = MmixLcg(0)
    assert lcg.next() == MMIX_INCREMENT
    assert lcg.next() == 1876011003808476466
    assert lcg.next() == 11166244414315200793
    assert lcg.state == 11166244414315200793


def test_skip_matches_repeated_next() -> None:
    skipped = MmixLcg(0)
    skipped.skip(2 * SEED_FUSE)
    assert skipped.state == 2334851202895766344

    stepped = MmixLcg(0)
    for _ in range(2 * SEED_FUSE):
        stepped.next()
    assert stepped.state == skipped.state


def test_seed_is_reduced_to_64_bits() -> None:
    assert MmixLcg(-1).state == MASK64
    assert MmixLcg(-1).next() == 13525302890751722018
    assert MmixLcg(1 << 64).state == 0


def test_upper32_reads_high_half_of_next_state() -> None:
    lcg = MmixLcg(0)
    assert lcg.upper32() == MMIX_INCREMENT >> 32
    assert lcg.state == MMIX_INCREMENT
