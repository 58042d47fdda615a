from yoto_cli.services.sources import SourceKind, classify_source


def test_classify_source():
    assert classify_source("yoto:#abc") is SourceKind.INTERNAL
    assert classify_source("https://x/y.mp3") is SourceKind.EXTERNAL
    assert classify_source("http://x/y.mp3") is SourceKind.EXTERNAL
    assert classify_source("./a.mp3") is SourceKind.LOCAL


def test_unrecognized_source_is_local():
    # no extension and no scheme still means a local path
    assert classify_source("abc123") is SourceKind.LOCAL
    assert classify_source("htps://typo/y.mp3") is SourceKind.LOCAL
