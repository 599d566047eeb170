import pytest

from core.errors import FileParseError
from parsers.csv_tokenizer import decode_bytes, detect_delimiter, split_fields, tokenize


def test_detect_delimiter_priority():
    assert detect_delimiter("a\tb;c,d") == "\t"
    assert detect_delimiter("a;b,c") == ";"
    assert detect_delimiter("a,b,c") == ","
    assert detect_delimiter("solo una colonna") == ","


def test_blank_and_whitespace_lines_are_skipped():
    text = "a,b,c\n\n   \n1,2,3\n\t\n4,5,6\n\n"
    table = tokenize(text)

    assert table.header == ["a", "b", "c"]
    assert table.rows == [["1", "2", "3"], ["4", "5", "6"]]


def test_quoted_fields_keep_delimiters_and_newlines():
    text = 'id;nota;prezzo\n1;"riga uno\nriga due";"1.066,22 €"\n2;"a; b";10\n'
    table = tokenize(text)

    assert table.delimiter == ";"
    assert table.rows == [
        ["1", "riga uno\nriga due", "1.066,22 €"],
        ["2", "a; b", "10"],
    ]


def test_values_are_trimmed_and_unquoted():
    table = tokenize('"Codice" , "Stato"\n  "HM1" ,  "OK"  \n')

    assert table.header == ["Codice", "Stato"]
    assert table.rows == [["HM1", "OK"]]


def test_bom_is_stripped_before_sniffing_and_header_matching():
    table = tokenize("\ufeffCodice di conferma;Stato\nHM1;OK\n")

    assert table.delimiter == ";"
    assert table.header[0] == "Codice di conferma"


def test_crlf_line_endings():
    table = tokenize("a,b\r\n1,2\r\n\r\n3,4\r\n")

    assert table.rows == [["1", "2"], ["3", "4"]]


def test_empty_text_gives_empty_header():
    table = tokenize("\n  \n")

    assert table.header == []
    assert table.rows == []


def test_split_fields_respects_quotes():
    assert split_fields('"a;b";c; d ', ";") == ["a;b", "c", "d"]


def test_decode_bytes_handles_bom_and_latin1():
    assert decode_bytes("\ufeffCittà".encode("utf-8")) == "Città"
    assert decode_bytes("Città".encode("latin-1")) == "Città"


def test_quote_after_space_still_protects_delimiter():
    table = tokenize('id,nota\n1, "a, b"\n')

    assert table.rows == [["1", "a, b"]]
    assert split_fields('1, "a, b"', ",") == ["1", "a, b"]


def test_unclosed_quote_on_huge_field_is_a_file_error():
    text = 'Codice di conferma,Stato\nHM2,"OK,' + "x" * 200_000 + "\n"

    with pytest.raises(FileParseError, match="CSV malformato"):
        tokenize(text)
