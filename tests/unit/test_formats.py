from mathdoc.normalization.formats import (
    convert_tsv_to_markdown,
    detect_table,
    extract_smiles,
    extract_table_html,
    index_data_entries,
)


class TestConvertTsvToMarkdown:
    def test_header_separator_and_rows(self) -> None:
        assert convert_tsv_to_markdown("a\tb\n1\t2") == (
            "| a | b |\n| --- | --- |\n| 1 | 2 |"
        )

    def test_two_data_rows(self) -> None:
        markdown = convert_tsv_to_markdown("Name\tAge\nAlice\t30\nBob\t25")
        assert markdown.split("\n") == [
            "| Name | Age |",
            "| --- | --- |",
            "| Alice | 30 |",
            "| Bob | 25 |",
        ]

    def test_short_rows_padded(self) -> None:
        assert convert_tsv_to_markdown("a\tb\tc\n1") == (
            "| a | b | c |\n| --- | --- | --- |\n| 1 |  |  |"
        )

    def test_blank_lines_skipped(self) -> None:
        assert convert_tsv_to_markdown("a\n\n1\n") == "| a |\n| --- |\n| 1 |"

    def test_empty_input(self) -> None:
        assert convert_tsv_to_markdown("") == ""
        assert convert_tsv_to_markdown("   \n  ") == ""


class TestDetectTable:
    def test_tsv_entry(self) -> None:
        assert detect_table({"data": [{"type": "tsv", "value": "a\tb"}]}) is True

    def test_html_table(self) -> None:
        assert detect_table({"html": "<div><TABLE class='x'><tr></tr></TABLE></div>"}) is True

    def test_table_line(self) -> None:
        response = {"line_data": [{"type": "text"}, {"type": "table"}]}
        assert detect_table(response) is True

    def test_no_table(self) -> None:
        response = {"html": "<p>x</p>", "line_data": [{"type": "math"}], "data": []}
        assert detect_table(response) is False

    def test_empty_response(self) -> None:
        assert detect_table({}) is False

    def test_empty_tsv_value_is_not_a_table(self) -> None:
        assert detect_table({"data": [{"type": "tsv", "value": ""}]}) is False


class TestIndexDataEntries:
    def test_first_entry_per_type_wins(self) -> None:
        data = [
            {"type": "latex", "value": "x"},
            {"type": "latex", "value": "y"},
            {"type": "mathml", "value": "<math/>"},
        ]
        assert index_data_entries(data) == {"latex": "x", "mathml": "<math/>"}

    def test_malformed_entries_ignored(self) -> None:
        assert index_data_entries([None, {"value": "x"}, {"type": "tsv", "value": 3}]) == {
            "tsv": ""
        }

    def test_not_a_list(self) -> None:
        assert index_data_entries({"type": "latex"}) == {}


class TestExtractTableHtml:
    def test_joins_tables(self) -> None:
        html = "<p>a</p><table><tr><td>1</td></tr></table><p>b</p><table></table>"
        assert extract_table_html(html) == (
            "<table><tr><td>1</td></tr></table>\n\n<table></table>"
        )

    def test_no_tables(self) -> None:
        assert extract_table_html("<p>plain</p>") == ""


class TestExtractSmiles:
    def test_from_text_with_context(self) -> None:
        response = {"text": "The structure of benzene is <smiles>c1ccccc1</smiles> here"}
        entries = extract_smiles(response)
        assert len(entries) == 1
        assert entries[0].notation == "c1ccccc1"
        assert entries[0].context == "The structure of benzene is"

    def test_default_context(self) -> None:
        entries = extract_smiles({"text": "<smiles>CCO</smiles>"})
        assert entries[0].context == "General chemistry"

    def test_from_chemistry_lines(self) -> None:
        response = {
            "line_data": [
                {"id": 7, "type": "diagram", "subtype": "chemistry",
                 "text": "<smiles>CC(=O)O</smiles>"},
                {"id": 8, "type": "text", "text": "<smiles>ignored</smiles>"},
            ]
        }
        entries = extract_smiles(response)
        assert [(e.notation, e.context, e.line_id) for e in entries] == [
            ("CC(=O)O", "diagram", "7")
        ]

    def test_no_smiles(self) -> None:
        assert extract_smiles({"text": "x^2"}) == []
