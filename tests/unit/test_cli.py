"""
Tests for the linkcanon CLI.
"""

import io
import json

import pytest

from linkcanon.cli import build_parser, main


@pytest.fixture
def stdin(monkeypatch: pytest.MonkeyPatch):
    """Replace stdin with the given text."""

    def _set(text: str) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(text))

    return _set


# =============================================================================
# clean
# =============================================================================


def test_clean_prints_canonical_urls(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        ["clean", "https://example.com/?utm_source=x&q=1", "https://example.com/path"]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.splitlines() == ["https://example.com/?q=1", "https://example.com/path"]


def test_clean_reads_stdin(stdin, capsys: pytest.CaptureFixture[str]) -> None:
    """Blank lines and comments in stdin are skipped."""
    stdin("https://example.com/?fbclid=1\n\n# comment\nhttps://example.com/a?gclid=2#x\n")

    exit_code = main(["clean"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "https://example.com/",
        "https://example.com/a#x",
    ]


def test_clean_invalid_url_exit_code(capsys: pytest.CaptureFixture[str]) -> None:
    """Invalid URLs are reported on stderr and make the exit code non-zero."""
    exit_code = main(["clean", "not-a-url", "https://example.com/?utm_source=x"])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert captured.out.splitlines() == ["https://example.com/"]
    assert "Invalid URL" in captured.err


def test_clean_json(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["clean", "--json", "https://example.com/?utm_source=x&q=1"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["canonicalUrl"] == "https://example.com/?q=1"
    assert payload["removedParameters"] == ["utm_source"]
    assert payload["changed"] is True


def test_clean_long_host_label_same_exit_code_with_json(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A URL that canonicalizes is never rejected by --json for want of a dedup key."""
    url = "https://" + "a" * 64 + ".example.com/p?utm_source=x"

    assert main(["clean", url]) == 0
    assert main(["clean", "--json", url]) == 0

    plain, as_json = capsys.readouterr().out.splitlines()
    assert plain == "https://" + "a" * 64 + ".example.com/p"
    assert json.loads(as_json)["canonicalUrl"] == plain


def test_clean_keep_and_strip_flags(capsys: pytest.CaptureFixture[str]) -> None:
    url = "https://www.youtube.com/watch?v=abc&t=42&sessionid=9"

    main(["clean", "--keep", "t", "--strip", "sessionid", url])

    assert capsys.readouterr().out.strip() == "https://www.youtube.com/watch?v=abc&t=42"


def test_clean_preset_flag(capsys: pytest.CaptureFixture[str]) -> None:
    main(["clean", "--preset", "extended", "https://www.amazon.com/dp/B000?tag=aff-20"])

    assert capsys.readouterr().out.strip() == "https://www.amazon.com/dp/B000"


def test_clean_env_preset(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("LINKCANON_TRACKING_PRESET", "extended")

    main(["clean", "https://www.amazon.com/dp/B000?tag=aff-20"])

    assert capsys.readouterr().out.strip() == "https://www.amazon.com/dp/B000"


def test_invalid_env_preset_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINKCANON_TRACKING_PRESET", "strict")

    with pytest.raises(SystemExit) as exc_info:
        main(["clean", "https://example.com/"])
    assert exc_info.value.code == 2


# =============================================================================
# check / key / duplicates
# =============================================================================


def test_check_lists_tracking_parameters(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["check", "https://example.com/?utm_source=x&fbclid=y", "https://a.example/"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "tracking: utm_source, fbclid" in out
    assert "clean" in out


def test_check_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["check", "--json", "https://example.com/?gclid=1"])

    payload = json.loads(capsys.readouterr().out)
    assert payload == {"url": "https://example.com/?gclid=1", "trackingParameters": ["gclid"]}


def test_check_invalid_url(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", "not-a-url"]) == 1


def test_key_prints_dedup_key(capsys: pytest.CaptureFixture[str]) -> None:
    main(["key", "http://EXAMPLE.com/a?utm_source=x", "https://example.com/a"])

    first, second = capsys.readouterr().out.splitlines()
    assert first == second
    assert first.startswith("https://example.com/a")


def test_key_json(capsys: pytest.CaptureFixture[str]) -> None:
    main(["key", "--json", "https://example.com/a?utm_source=x"])

    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "url": "https://example.com/a?utm_source=x",
        "dedupKey": "https://example.com/a",
    }


def test_duplicates_groups_stdin(stdin, capsys: pytest.CaptureFixture[str]) -> None:
    stdin("https://example.com/a?utm_source=x\nhttps://example.com/b\nhttp://example.com/a\n")

    exit_code = main(["duplicates", "--json"])

    groups = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert list(groups.values()) == [
        ["https://example.com/a?utm_source=x", "http://example.com/a"]
    ]


def test_duplicates_none_found(stdin, capsys: pytest.CaptureFixture[str]) -> None:
    stdin("https://example.com/a\nhttps://example.com/b\n")

    assert main(["duplicates"]) == 0
    assert capsys.readouterr().out == ""


def test_duplicates_invalid_url_exit_code(stdin, capsys: pytest.CaptureFixture[str]) -> None:
    """Skipped invalid URLs make the exit code non-zero; groups are still printed."""
    stdin("not-a-url\nhttps://example.com/a?utm_source=x\nhttps://example.com/a\n")

    exit_code = main(["duplicates", "--json"])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert list(json.loads(captured.out).values()) == [
        ["https://example.com/a?utm_source=x", "https://example.com/a"]
    ]
    assert "Skipping invalid URL" in captured.err


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
