import asyncio

import pytest

from conftest import DEFAULT_ICON, chapter_dict, track_dict
from yoto_cli.errors import LocalFileError, UserInputError
from yoto_cli.services.playlist_service import normalize_on_end


def _seed(fake_client):
    fake_client.add_card(
        "card1",
        title="Road Trip",
        metadata={"author": "Sam", "description": "Songs"},
        chapters=[
            chapter_dict("00", "Intro", [track_dict("01", "Hello")]),
            chapter_dict(
                "01",
                "Songs",
                [track_dict("01", "A"), track_dict("02", "B"), track_dict("03", "C")],
            ),
        ],
    )


def test_create_playlist(fake_client, playlist_service):
    card = asyncio.run(playlist_service.create_playlist("New One", description="Desc"))

    assert card.title == "New One"
    assert card.content.chapters == []
    assert card.content.playback_type == "linear"
    assert card.metadata.description == "Desc"
    assert card.metadata.author is None


def test_update_playlist_merges_metadata(fake_client, playlist_service):
    _seed(fake_client)

    asyncio.run(playlist_service.update_playlist("card1", description="More songs"))

    card = fake_client.stored_card("card1")
    assert card.title == "Road Trip"
    assert card.metadata.description == "More songs"
    assert card.metadata.author == "Sam"
    assert len(card.content.chapters) == 2


def test_delete_playlist(fake_client, playlist_service):
    _seed(fake_client)

    asyncio.run(playlist_service.delete_playlist("card1"))

    assert "card1" not in fake_client.cards


def test_add_empty_chapter_uses_default_icon(fake_client, playlist_service):
    _seed(fake_client)

    added = asyncio.run(playlist_service.add_chapter("card1", "Outro"))

    chapter = fake_client.stored_card("card1").content.chapters[2]
    assert added.index == 2
    assert added.track_url is None
    assert chapter.key == "02"
    assert chapter.tracks == []
    assert chapter.icon == DEFAULT_ICON
    assert chapter.display.icon_16x16 == f"yoto:#{DEFAULT_ICON}"


def test_add_chapter_with_file(tmp_path, fake_client, playlist_service):
    _seed(fake_client)
    song = tmp_path / "outro.mp3"
    song.write_bytes(b"outro")

    added = asyncio.run(playlist_service.add_chapter("card1", "Outro", file=song))

    chapter = fake_client.stored_card("card1").content.chapters[2]
    assert len(chapter.tracks) == 1
    assert chapter.tracks[0].track_url == added.track_url
    assert added.duration == 125.0


def test_update_and_delete_chapter(fake_client, playlist_service):
    _seed(fake_client)

    asyncio.run(playlist_service.update_chapter("card1", 1, title="Music", icon="yoto:#note"))
    removed = asyncio.run(playlist_service.delete_chapter("card1", 0))

    card = fake_client.stored_card("card1")
    assert removed.title == "Intro"
    assert [c.title for c in card.content.chapters] == ["Music"]
    assert card.content.chapters[0].icon == "note"
    assert card.content.chapters[0].display.icon_16x16 == "yoto:#note"


def test_add_track_from_url_keeps_source(fake_client, playlist_service):
    _seed(fake_client)

    added = asyncio.run(
        playlist_service.add_track("card1", 0, "Stream", "https://example.test/a.mp3", duration=42)
    )

    tracks = fake_client.stored_card("card1").content.chapters[0].tracks
    assert added.index == 1
    assert added.chapter_title == "Intro"
    assert added.upload is None
    assert tracks[1].key == "02"
    assert tracks[1].track_url == "https://example.test/a.mp3"
    assert tracks[1].duration == 42
    assert tracks[1].display is None
    assert fake_client.puts == []


def test_add_track_from_local_file(tmp_path, fake_client, playlist_service):
    _seed(fake_client)
    song = tmp_path / "d.mp3"
    song.write_bytes(b"d audio")

    added = asyncio.run(playlist_service.add_track("card1", 1, "D", str(song)))

    track = fake_client.stored_card("card1").content.chapters[1].tracks[3]
    assert track.title == "D"
    assert track.track_url == added.upload.track_url
    assert track.duration == 125.0
    assert len(fake_client.puts) == 1


def test_add_track_explicit_duration_wins(tmp_path, fake_client, playlist_service):
    _seed(fake_client)
    song = tmp_path / "d.mp3"
    song.write_bytes(b"d audio")

    asyncio.run(playlist_service.add_track("card1", 1, "D", str(song), duration=10))

    assert fake_client.stored_card("card1").content.chapters[1].tracks[3].duration == 10


def test_update_track_on_end(fake_client, playlist_service):
    _seed(fake_client)

    asyncio.run(playlist_service.update_track("card1", 1, 2, on_end="loop", url="yoto:#other"))

    track = fake_client.stored_card("card1").content.chapters[1].tracks[2]
    assert track.events.on_end.cmd == "repeat"
    assert track.track_url == "yoto:#other"
    assert fake_client.writes[-1]["content"]["chapters"][1]["tracks"][2]["events"] == {
        "onEnd": {"cmd": "repeat"}
    }


def test_delete_track_shifts_positions(fake_client, playlist_service):
    _seed(fake_client)

    chapter, removed = asyncio.run(playlist_service.delete_track("card1", 1, 0))

    assert removed.title == "A"
    assert chapter.title == "Songs"
    tracks = fake_client.stored_card("card1").content.chapters[1].tracks
    assert [t.title for t in tracks] == ["B", "C"]


def test_track_index_out_of_range(fake_client, playlist_service):
    _seed(fake_client)

    with pytest.raises(UserInputError) as excinfo:
        asyncio.run(playlist_service.delete_track("card1", 0, 5))

    assert str(excinfo.value) == "Track 5 not found. Use 0-based index."
    assert fake_client.writes == []


def test_chapter_index_out_of_range(fake_client, playlist_service):
    _seed(fake_client)

    with pytest.raises(UserInputError) as excinfo:
        asyncio.run(playlist_service.update_chapter("card1", 7, title="X"))

    assert str(excinfo.value) == "Chapter 7 not found. Use 0-based index."


def test_normalize_on_end():
    assert normalize_on_end("continue") == "none"
    assert normalize_on_end("Pause") == "stop"
    assert normalize_on_end("repeat") == "repeat"
    with pytest.raises(UserInputError):
        normalize_on_end("rewind")


def test_add_track_unrecognized_source_is_tried_as_local_file(tmp_path, monkeypatch, fake_client, playlist_service):
    _seed(fake_client)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(LocalFileError) as excinfo:
        asyncio.run(playlist_service.add_track("card1", 0, "T", "abc123"))

    assert str(excinfo.value) == "File not found: abc123"
    assert fake_client.puts == []
    assert fake_client.writes == []
