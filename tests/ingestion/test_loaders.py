import pandas as pd
import pytest

from port_verifier.ingestion.loaders import UnsupportedFileTypeError, load_names


@pytest.fixture()
def sample_dataframe():
    return pd.DataFrame(
        [
            {"Row": "1", "Port Name": "USLAX", "Notes": "west coast"},
            {"Row": "2", "Port Name": "  SHEKOU ", "Notes": ""},
            {"Row": "3", "Port Name": "", "Notes": "blank name"},
            {"Row": "4", "Port Name": "Hamburg", "Notes": ""},
        ]
    )


def test_load_names_from_text_file(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("USLAX\n\n  SHEKOU  \nHamburg\n", encoding="utf-8")

    assert load_names(path) == ["USLAX", "SHEKOU", "Hamburg"]


def test_load_names_from_csv_detects_name_column(sample_dataframe, tmp_path):
    csv_path = tmp_path / "ports.csv"
    sample_dataframe.to_csv(csv_path, index=False)

    assert load_names(csv_path) == ["USLAX", "SHEKOU", "Hamburg"]


def test_load_names_from_excel_with_explicit_column(sample_dataframe, tmp_path):
    excel_path = tmp_path / "ports.xlsx"
    sample_dataframe.to_excel(excel_path, index=False)

    assert load_names(excel_path, column="Notes") == ["west coast", "blank name"]


def test_load_names_falls_back_to_first_column(tmp_path):
    csv_path = tmp_path / "codes.csv"
    csv_path.write_text("Code,Other\nUSLAX,x\nCNSWA,y\n", encoding="utf-8")

    assert load_names(csv_path) == ["USLAX", "CNSWA"]


def test_missing_column_raises(sample_dataframe, tmp_path):
    csv_path = tmp_path / "ports.csv"
    sample_dataframe.to_csv(csv_path, index=False)

    with pytest.raises(KeyError):
        load_names(csv_path, column="Location")


def test_unsupported_file_extension(tmp_path):
    bad_path = tmp_path / "ports.json"
    bad_path.write_text("{}", encoding="utf-8")

    with pytest.raises(UnsupportedFileTypeError):
        load_names(bad_path)
