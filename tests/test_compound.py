import pytest

from bhaktimap.compound import extract_unique, parse_compound
from bhaktimap.vocab import LANGUAGE, TRADITION


# --------- language ---------

def test_language_slash_split():
    assert set(parse_compound(LANGUAGE, "Punjabi/Braj Bhasha")) == {"Punjabi", "Braj Bhasha"}


def test_language_dialect_extraction():
    out = parse_compound(LANGUAGE, "Hindi (Braj, Avadhi dialects)")
    assert set(out) == {"Hindi", "Braj Bhasha", "Awadhi"}
    assert len(out) == 3


def test_language_separators():
    assert parse_compound(LANGUAGE, "Kannada & Sanskrit") == ["Kannada", "Sanskrit"]
    assert parse_compound(LANGUAGE, "Marathi and Hindi") == ["Marathi", "Hindi"]
    assert parse_compound(LANGUAGE, "Tamil; Telugu | Sanskrit") == ["Tamil", "Telugu", "Sanskrit"]


def test_language_drops_filler_and_qualifiers():
    assert parse_compound(LANGUAGE, "Hindi, with Persian influences") == ["Hindi"]
    assert parse_compound(LANGUAGE, "Tamil; Classical") == ["Tamil"]
    assert parse_compound(LANGUAGE, "Sanskrit (sometimes), Kannada") == ["Sanskrit", "Kannada"]
    assert parse_compound(LANGUAGE, "Hindi, x") == ["Hindi"]


def test_language_long_parenthetical_is_discarded():
    raw = "Hindi (a very long description of the many regional forms spoken, Braj dialects)"
    assert parse_compound(LANGUAGE, raw) == ["Hindi"]


def test_language_short_parenthetical_is_stripped():
    assert parse_compound(LANGUAGE, "Marathi (Old)") == ["Marathi"]


def test_language_duplicates_collapse():
    assert parse_compound(LANGUAGE, "Bangla, Bengali, bengali") == ["Bengali"]


def test_language_nested_parentheses():
    out = parse_compound(LANGUAGE, "Hindi (Braj (old), Avadhi dialects)")
    assert out == ["Hindi", "Braj Bhasha", "Awadhi"]
    assert not any("(" in t or ")" in t for t in parse_compound(LANGUAGE, "Hindi (Braj, Avadhi"))


# --------- tradition ---------

def test_tradition_slash_alternates():
    assert set(parse_compound(TRADITION, "Vīraśaiva / Liṅgāyat")) == {"Virashaiva", "Lingayat"}


def test_tradition_en_dash_split():
    out = parse_compound(TRADITION, "Śaiva Siddhānta – Tamil Śaiva Bhakti")
    assert out == ["Shaiva Siddhanta", "Tamil Shaiva Bhakti"]


def test_tradition_dash_variants():
    assert parse_compound(TRADITION, "Sufi—Chishti") == ["Sufi", "Chishti"]
    assert parse_compound(TRADITION, "Vaishnava - Pushtimarg") == ["Vaishnava", "Pushtimarg"]
    # a word hyphen is not a separator
    assert parse_compound(TRADITION, "Nath-Siddha") == ["Nath-Siddha"]


def test_tradition_parenthetical_alternate_kept():
    assert parse_compound(TRADITION, "Lingayat (Virashaiva)") == ["Lingayat", "Virashaiva"]
    assert parse_compound(TRADITION, "Alvar (Azhwar/Alwar)") == ["Alvar"]


def test_tradition_descriptive_parenthetical_dropped():
    assert parse_compound(TRADITION, "Sant Mat (spiritual lineage)") == ["Sant Mat"]
    assert parse_compound(TRADITION, "Varkari (rooted in Pandharpur)") == ["Varkari"]
    # more than four words
    assert parse_compound(TRADITION, "Sikh (Guru Nanak and his nine successors)") == ["Sikh"]


def test_tradition_excluded_alternates():
    assert parse_compound(TRADITION, "Tamil Shaiva Bhakti (Nayanars)") == ["Tamil Shaiva Bhakti"]
    assert parse_compound(TRADITION, "Shaiva (Tevaram canon)") == ["Shaiva"]
    assert parse_compound(TRADITION, "Sikh (SG)") == ["Sikh"]


def test_tradition_generic_suffix_stripped():
    assert parse_compound(TRADITION, "Varkari Tradition") == ["Varkari"]
    assert parse_compound(TRADITION, "Kabir Panth movement") == ["Kabir Panth"]
    assert parse_compound(TRADITION, "Shakta (devotion") == ["Shakta"]
    assert parse_compound(TRADITION, "Bhakti Movement (Sant)") == ["Bhakti", "Sant"]


def test_tradition_duplicates_collapse():
    assert parse_compound(TRADITION, "Vīraśaiva / Virashaiva") == ["Virashaiva"]


# --------- shared ---------

@pytest.mark.parametrize("kind", [LANGUAGE, TRADITION])
def test_empty_input(kind):
    assert parse_compound(kind, None) == []
    assert parse_compound(kind, "") == []
    assert parse_compound(kind, "   ") == []


def test_unknown_kind():
    with pytest.raises(ValueError):
        parse_compound("gender", "Female")


@pytest.mark.parametrize("kind,raw", [
    (LANGUAGE, "Hindi (Braj, Avadhi dialects)"),
    (LANGUAGE, "Bangla / Odiya; Sadhukkari"),
    (TRADITION, "Śaiva Siddhānta – Tamil Śaiva Bhakti"),
    (TRADITION, "Vīraśaiva / Liṅgāyat"),
    (TRADITION, "Sufi—Chishti"),
    (TRADITION, "Nath-Siddha"),
    (TRADITION, "Bhakti Movement (Sant)"),
    (TRADITION, "Varkari Tradition (Warkari)"),
    (TRADITION, "Sufi (Chishti Order) / Sant Mat movement"),
    (LANGUAGE, "Hindi (Braj (old), Avadhi dialects)"),
    (LANGUAGE, "Kannada (Old) & Sanskrit (Vedic)"),
])
def test_canonical_tokens_reparse_to_themselves(kind, raw):
    for token in parse_compound(kind, raw):
        assert parse_compound(kind, token) == [token]


# --------- extract_unique ---------

def test_extract_unique_dedupes_across_rows():
    assert extract_unique(LANGUAGE, ["Hindi, Sanskrit", "hindi"]) == ["Hindi", "Sanskrit"]


def test_extract_unique_skips_nullish():
    assert extract_unique(LANGUAGE, [None, "", "Tamil"]) == ["Tamil"]


def test_extract_unique_sort_ignores_diacritics_and_case():
    out = extract_unique(TRADITION, ["Śrīvidyā", "Sikh", "Shakta", "advaita"])
    assert out == ["Advaita", "Shakta", "Sikh", "Śrīvidyā"]
