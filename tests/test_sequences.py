import pytest

from bmpstash.sequences import PaddedSequence


def test_get_element_in_range():
    seq = PaddedSequence([7, 8, 9])
    assert seq.get_element(0, -1) == 7
    assert seq.get_element(2, -1) == 9


@pytest.mark.parametrize("index", [3, 10, -1, -3])
def test_get_element_out_of_range_returns_default(index):
    seq = PaddedSequence([7, 8, 9])
    assert seq.get_element(index, "missing") == "missing"


def test_get_triplet_full():
    seq = PaddedSequence([1, 2, 3, 4, 5, 6])
    assert seq.get_triplet(0, 0) == (1, 2, 3)
    assert seq.get_triplet(1, 0) == (4, 5, 6)


def test_get_triplet_padded():
    seq = PaddedSequence([1, 2, 3, 4, 5])
    assert seq.get_triplet(1, 0) == (4, 5, 0)
    assert seq.get_triplet(2, 0) == (0, 0, 0)


def test_get_triplet_negative_index():
    seq = PaddedSequence([1, 2, 3])
    assert seq.get_triplet(-1, None) == (None, None, None)


def test_behaves_as_list():
    seq = PaddedSequence(b"ab")
    seq.append(99)
    assert list(seq) == [97, 98, 99]
    assert seq.get_element(2, 0) == 99


def test_triplets_cover_every_element():
    values = list(range(12))
    seq = PaddedSequence(values)
    flattened = [item for i in range(4) for item in seq.get_triplet(i, None)]
    assert flattened == values