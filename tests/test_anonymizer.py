import pytest

from pupil_anonymiser.errors import PseudonymCollisionError
from pupil_anonymiser.preprocess.anonymizer import PseudonymPair, build_pseudonym_map

NAMES = [
    "Bob Jones", "Alice Smith", "Cara Patel", "Dev Shah", "Ellie Moss",
    "Finn Hale", "Gita Rao", "Hugh Dean", "Ivy Lowe", "Jon Reed",
]


def test_end_to_end_map_in_input_order():
    pmap = build_pseudonym_map(["bob jones", "Alice Smith"], scheme="Pupil-###", start_at=1)
    assert pmap.real_to_pseudo == {"Bob Jones": "Pupil-001", "Alice Smith": "Pupil-002"}
    assert pmap.pseudo_to_real == {"Pupil-001": "Bob Jones", "Pupil-002": "Alice Smith"}
    assert pmap.pairs == [
        PseudonymPair(real="Bob Jones", pseudo="Pupil-001"),
        PseudonymPair(real="Alice Smith", pseudo="Pupil-002"),
    ]


def test_duplicates_collapse_to_one_entry():
    pmap = build_pseudonym_map(["Alice Smith", "alice smith", " Alice  Smith "])
    assert len(pmap) == 1
    assert list(pmap.real_to_pseudo) == ["Alice Smith"]


@pytest.mark.parametrize("names", [[], ["", "   ", None]])
def test_empty_input_gives_empty_map(names):
    pmap = build_pseudonym_map(names)
    assert len(pmap) == 0
    assert not pmap
    assert pmap.real_to_pseudo == {}
    assert pmap.pseudo_to_real == {}


@pytest.mark.parametrize("seed", [None, 0, 7, 12345])
@pytest.mark.parametrize("scheme", ["Pupil-###", "Anon-##", "Greek"])
def test_map_is_a_bijection(seed, scheme):
    names = NAMES + ["bob JONES", "  "]
    pmap = build_pseudonym_map(names, scheme=scheme, seed=seed)
    assert len(pmap.real_to_pseudo) == len(pmap.pseudo_to_real) == len(NAMES)
    for real, pseudo in pmap.real_to_pseudo.items():
        assert pmap.pseudo_to_real[pseudo] == real


def test_greek_scheme_recycles_with_suffix():
    names = [f"Pupil Name{i}" for i in range(30)]
    pmap = build_pseudonym_map(names, scheme="Greek")
    labels = [p.pseudo for p in pmap.pairs]
    assert labels[0] == "Alpha-1"
    assert labels[24] == "Alpha-2"
    assert len(set(labels)) == 30


def test_same_seed_same_assignment():
    a = build_pseudonym_map(NAMES, seed=7)
    b = build_pseudonym_map(NAMES, seed=7)
    assert a.real_to_pseudo == b.real_to_pseudo


def test_different_seed_different_assignment():
    a = build_pseudonym_map(NAMES, seed=7)
    b = build_pseudonym_map(NAMES, seed=8)
    assert a.real_to_pseudo != b.real_to_pseudo


def test_seeded_labels_are_still_sequential():
    pmap = build_pseudonym_map(NAMES, seed=3)
    assert [p.pseudo for p in pmap.pairs] == [f"Pupil-{i:03d}" for i in range(1, 11)]
    assert sorted(p.real for p in pmap.pairs) == sorted(NAMES)


def test_bool_seed_is_not_a_seed():
    assert build_pseudonym_map(NAMES, seed=True).pairs == build_pseudonym_map(NAMES).pairs


def test_start_at_offsets_numbers():
    pmap = build_pseudonym_map(["Bob Jones"], start_at=10)
    assert pmap.real_to_pseudo["Bob Jones"] == "Pupil-010"


def test_custom_scheme():
    pmap = build_pseudonym_map(["Bob Jones", "Alice Smith"], scheme=lambda n, i: f"Child {n}", start_at=5)
    assert pmap.real_to_pseudo == {"Bob Jones": "Child 5", "Alice Smith": "Child 6"}


def test_custom_scheme_collision_is_rejected():
    with pytest.raises(PseudonymCollisionError):
        build_pseudonym_map(["Bob Jones", "Alice Smith"], scheme=lambda n, i: "Same")


def test_custom_scheme_empty_label_is_rejected():
    with pytest.raises(PseudonymCollisionError):
        build_pseudonym_map(["Bob Jones"], scheme=lambda n, i: "")


def test_display_lines():
    pmap = build_pseudonym_map(["bob jones", "Alice Smith"])
    assert pmap.display_lines() == ["Pupil-001 ⟷ Bob Jones", "Pupil-002 ⟷ Alice Smith"]


def test_map_methods_round_trip():
    pmap = build_pseudonym_map(["bob jones", "Alice Smith"])
    text = "Bob Jones and Alice Smith are partners"
    anon = pmap.anonymise(text)
    assert anon == "Pupil-001 and Pupil-002 are partners"
    assert pmap.reidentify(anon) == text
