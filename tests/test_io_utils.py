import json
from pathlib import Path

import pytest

from tokensplit.io_utils import load_domain_prefixes, load_texts, save_results


def test_load_texts_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "tokens.txt"
    path.write_text("helloworld\n\n  chatgptlogin  \n", encoding="utf-8")

    assert load_texts(str(path)) == ["helloworld", "chatgptlogin"]


def test_load_texts_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_texts(str(tmp_path / "missing.txt"))


def test_load_domain_prefixes_filters_rows(tmp_path: Path) -> None:
    path = tmp_path / "top.csv"
    path.write_text(
        "rank,score,domain\n"
        "1,99,microsoftoffice.com\n"
        "2,98,short.com\n"
        "3,97,my-hyphenated-site.org\n"
        "4,96,kubernetescluster.io\n"
        "5,95\n"
        "6,94,chatgptlogin.net\n",
        encoding="utf-8",
    )

    assert load_domain_prefixes(str(path)) == ["microsoftoffice", "kubernetescluster", "chatgptlogin"]
    assert load_domain_prefixes(str(path), limit=2) == ["microsoftoffice", "kubernetescluster"]


def test_save_results_writes_expected_structure(tmp_path: Path) -> None:
    out_path = tmp_path / "out.json"

    save_results(str(out_path), ["helloworld", ""], [["hello", "world"], []])

    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data["results"][0] == {"input": "helloworld", "words": ["hello", "world"]}
    assert data["results"][1]["words"] == []


def test_save_results_length_mismatch(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        save_results(str(tmp_path / "out.json"), ["a"], [])
