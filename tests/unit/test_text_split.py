from texbib.core.text import collation_key, find_closing_brace, split_braced


def test_split_braced_ignores_delimiters_inside_braces() -> None:
    tokens = split_braced("Smith and {Barnes and Noble} and Doe", r"\s+and\s+")
    assert tokens == ["Smith", "{Barnes and Noble}", "Doe"]


def test_split_braced_keeps_wrapping_braces_on_tokens() -> None:
    assert split_braced("{von} Neumann", r"\s+") == ["{von}", "Neumann"]


def test_split_braced_without_delimiter_returns_single_token() -> None:
    assert split_braced("Aristotle", r"\s*,\s*") == ["Aristotle"]


def test_split_braced_signals_unbalanced_input_with_empty_result() -> None:
    assert split_braced("Smith {John", r"\s+") == []
    assert split_braced("Smith} John", r"\s+") == []
    assert split_braced("", r"\s+") == []


def test_split_braced_nested_groups() -> None:
    tokens = split_braced("a,{b,{c,d}},e", ",")
    assert tokens == ["a", "{b,{c,d}}", "e"]


def test_find_closing_brace() -> None:
    assert find_closing_brace("{a{b}c}d", 0) == 6
    assert find_closing_brace("{a{b}c", 0) is None


def test_collation_key_folds_accents_and_case() -> None:
    assert collation_key("Ängström") == "angstrom"
