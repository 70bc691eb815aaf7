"""Tests for CSVFormatter."""

import csv
import io

import pytest

from graph_session.formatters.base import Formatter
from graph_session.formatters.csv import CSVFormatter
from tests.fakes import make_result


@pytest.mark.unit
def test_csv_formatter_implements_protocol():
    assert isinstance(CSVFormatter(), Formatter)


@pytest.mark.unit
def test_csv_formatter_outputs_header_and_data():
    lines = list(CSVFormatter().format(make_result()))
    assert lines == ["id,name", "1,alice", "2,bob"]


@pytest.mark.unit
def test_csv_formatter_no_header():
    lines = list(CSVFormatter(no_header=True).format(make_result()))
    assert lines == ["1,alice", "2,bob"]


@pytest.mark.unit
def test_csv_formatter_escapes_commas_and_quotes():
    result = make_result(rows=[(1, 'say "hi", bob')])
    lines = list(CSVFormatter().format(result))
    assert lines[1] == '1,"say ""hi"", bob"'


@pytest.mark.unit
def test_csv_formatter_empty_result_header_only():
    lines = list(CSVFormatter().format(make_result(rows=[])))
    assert lines == ["id,name"]


@pytest.mark.unit
def test_csv_formatter_handles_null_and_bool():
    result = make_result(rows=[(None, True)], columns=("a", "b"))
    lines = list(CSVFormatter().format(result))
    assert lines[1] == ",true"


@pytest.mark.unit
def test_csv_formatter_rfc4180_valid():
    result = make_result(rows=[(1, "line\nbreak"), (2, "plain")])
    text = "\r\n".join(CSVFormatter().format(result))
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed == [["id", "name"], ["1", "line\nbreak"], ["2", "plain"]]
