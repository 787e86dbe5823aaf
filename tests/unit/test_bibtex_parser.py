from texbib.infrastructure.parsers.bibtex_parser import BibTeXParser, MacroTable, parse_bibtex


def test_parse_bibtex_extracts_entries_and_fields() -> None:
    raw = """
@article{KeyOne,
  title={A Good Paper},
  author={Ada Lovelace and Alan Turing},
  year={2024},
  doi={10.1234/example},
  url={https://example.org/paper}
}

@TechReport{AnotherKey,
  TITLE = "Report Title",
  year = 2025,
  url = {https://example.org/report}
}
"""

    entries = parse_bibtex(raw)

    assert len(entries) == 2
    assert entries[0].type == "ARTICLE"
    assert entries[0].key == "KeyOne"
    assert entries[0].field("title") == "A Good Paper"
    assert entries[0].field("year") == "2024"
    assert entries[0].parse_ok is True
    assert entries[0].line == 2

    assert entries[1].type == "TECHREPORT"
    assert entries[1].key == "AnotherKey"
    assert entries[1].field("title") == "Report Title"
    assert entries[1].field("year") == 2025
    assert entries[1].line == 10


def test_bare_numbers_are_tracked_as_integers() -> None:
    (entry,) = parse_bibtex("@misc{k, year = 1999, volume = {12}, number = 007}")
    assert entry.field("year") == 1999
    assert entry.field("volume") == "12"
    assert entry.field("number") == "007"


def test_quoted_values_are_brace_aware() -> None:
    (entry,) = parse_bibtex('@misc{k, title = "The {"}Quoted{"} {GNU} Project"}')
    assert entry.field("title") == 'The {"}Quoted{"} {GNU} Project'


def test_macro_expansion_and_concatenation() -> None:
    raw = """
@string{me = "ME"}
@misc{k, field = me # "-more", note = 2024 # {a}}
"""
    (entry,) = parse_bibtex(raw)
    assert entry.resolve("field") == "ME-more"
    assert entry.field("note") == "2024a"


def test_macro_redefinition_is_not_retroactive() -> None:
    raw = """
@string{pub = "First"}
@misc{a, publisher = pub}
@STRING(pub = "Second")
@misc{b, publisher = PUB}
"""
    parser = BibTeXParser(raw)
    first, second = list(parser)
    assert first.field("publisher") == "First"
    assert second.field("publisher") == "Second"
    assert parser.macros.lookup("pub") == "Second"


def test_undefined_macro_passes_through_literally() -> None:
    (entry,) = parse_bibtex("@misc{k, month = jan}")
    assert entry.parse_ok is True
    assert entry.field("month") == "jan"


def test_comment_and_preamble_blocks_are_kept_verbatim() -> None:
    raw = "@preamble{ \"\\newcommand{\\noop}[1]{}\" }\n@Comment{jabref-meta: databaseType:biblatex;}\n"
    preamble, comment = parse_bibtex(raw)

    assert preamble.type == "PREAMBLE"
    assert preamble.key is None
    assert preamble.raw == '@preamble{ "\\newcommand{\\noop}[1]{}" }'
    assert preamble.field_names() == []
    assert preamble.to_string() == preamble.raw

    assert comment.is_comment
    assert comment.raw == "@Comment{jabref-meta: databaseType:biblatex;}"


def test_string_blocks_produce_no_entry() -> None:
    parser = BibTeXParser('@string{acm = "ACM Press"}')
    assert parser.next() is None
    assert "ACM" in parser.macros


def test_parenthesised_entries_and_junk_text() -> None:
    raw = """
Contact me at someone@example.org for corrections.
@book(KeyParen,
  title = {Parens},
)
"""
    (entry,) = parse_bibtex(raw)
    assert entry.key == "KeyParen"
    assert entry.field("title") == "Parens"


def test_missing_key_is_a_structural_error() -> None:
    (entry,) = parse_bibtex("@article{title = {No Key}}")
    assert entry.parse_ok is False
    assert entry.error == "missing key"
    assert entry.error_kind == "StructuralError"


def test_missing_equals_is_a_structural_error() -> None:
    (entry,) = parse_bibtex("@article{k,\n  title {Oops}\n}")
    assert entry.parse_ok is False
    assert entry.error == "missing '=' after field 'title'"
    assert entry.error_kind == "StructuralError"
    assert entry.line == 2


def test_missing_closing_brace_is_a_structural_error() -> None:
    (entry,) = parse_bibtex("@article{k,\n  title = {Fine}\n")
    assert entry.parse_ok is False
    assert entry.error == "missing closing brace"
    assert entry.error_kind == "StructuralError"


def test_unmatched_brace_in_value_is_a_lexical_error() -> None:
    (entry,) = parse_bibtex("@article{k,\n  title = {Open {brace}\n")
    assert entry.parse_ok is False
    assert entry.error == "unmatched brace in value of 'title'"
    assert entry.error_kind == "LexicalError"
    assert entry.line == 2


def test_unterminated_quote_is_a_lexical_error() -> None:
    (entry,) = parse_bibtex('@article{k,\n  title = "never closed\n')
    assert entry.parse_ok is False
    assert entry.error == "unterminated quote in value of 'title'"
    assert entry.error_kind == "LexicalError"


def test_failed_string_block_is_reported() -> None:
    (entry,) = parse_bibtex("@string{broken}")
    assert entry.type == "STRING"
    assert entry.parse_ok is False


def test_parser_reports_current_line() -> None:
    parser = BibTeXParser("@misc{a, title={A}}\n\n@misc{b, title={B}}\n")
    parser.next()
    assert parser.line == 1
    parser.next()
    assert parser.line == 3
    assert parser.next() is None


def test_macro_table_is_case_insensitive() -> None:
    table = MacroTable()
    table.define("JAN", "January")
    assert table.lookup("jan") == "January"
    assert "Jan" in table
    assert len(table) == 1


def test_parenthesised_comment_counts_nested_parens() -> None:
    comment, entry = parse_bibtex("@comment(a (b) c)\n@misc{k, title={T}}")

    assert comment.is_comment
    assert comment.raw == "@comment(a (b) c)"
    assert entry.key == "k"
