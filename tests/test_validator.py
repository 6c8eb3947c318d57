import pytest

from pipelines.validator import is_valid_repository_url


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/acme/widgets",
        "https://www.github.com/acme/widgets",
        "https://GitHub.COM/acme/widgets",
        "http://github.com/acme/widgets",
        "https://github.com/acme/widgets/tree/main/src",
        "https://github.com//acme//widgets/",
        "https://github.com/acme/widgets.git",
    ],
)
def test_accepts_owner_repo_urls_on_allowed_host(url):
    assert is_valid_repository_url(url) is True


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/acme/widgets",
        "https://github.com/acme",
        "https://github.com/",
        "https://github.com",
        "https://gist.github.com/acme/widgets",
        "https://github.com.evil.io/acme/widgets",
        "ftp://github.com/acme/widgets",
        "github.com/acme/widgets",
        "not a url",
        "",
        "   ",
        "https://github.com:notaport/acme/widgets",
        "https://[::1/acme/widgets",
    ],
)
def test_rejects_malformed_or_unsupported(url):
    assert is_valid_repository_url(url) is False


@pytest.mark.parametrize("value", [None, 42, b"https://github.com/a/b", ["https://github.com/a/b"]])
def test_non_string_input_is_rejected_not_raised(value):
    assert is_valid_repository_url(value) is False


def test_custom_allow_list():
    hosts = ("gitlab.com", "www.codeberg.org")
    assert is_valid_repository_url("https://gitlab.com/acme/widgets", hosts)
    assert is_valid_repository_url("https://www.gitlab.com/acme/widgets", hosts)
    # www. entries also admit the bare host
    assert is_valid_repository_url("https://codeberg.org/acme/widgets", hosts)
    assert not is_valid_repository_url("https://github.com/acme/widgets", hosts)


@pytest.mark.parametrize(
    "url",
    [" https://github.com/acme/widgets", "https://github.com/acme/widgets\n", "\thttps://github.com/acme/widgets "],
)
def test_surrounding_whitespace_is_rejected(url):
    # accepted strings go to the tool verbatim, so they must already be clean
    assert is_valid_repository_url(url) is False
