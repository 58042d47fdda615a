import pytest
from pydantic import ValidationError

from yoto_cli.api.models import (
    Card,
    DisplayIconManifest,
    IconUploadResponse,
    PublicIcon,
    UserIcon,
)

PUBLIC_ICON = {
    "createdAt": "2023-01-01T00:00:00Z",
    "displayIconId": "d1",
    "mediaId": "m1",
    "public": True,
    "publicTags": ["music", "notes"],
    "title": "Note",
    "url": "https://icons.test/m1",
    "userId": "yoto",
}

USER_ICON = {
    "createdAt": "2024-02-02T00:00:00Z",
    "displayIconId": "d2",
    "mediaId": "m2",
    "public": False,
    "url": "https://icons.test/m2",
    "userId": "me",
}


def test_icon_manifest_picks_variant_by_shape():
    manifest = DisplayIconManifest.model_validate({"displayIcons": [PUBLIC_ICON, USER_ICON]})

    public, user = manifest.display_icons
    assert isinstance(public, PublicIcon)
    assert public.public_tags == ["music", "notes"]
    assert isinstance(user, UserIcon)


def test_public_icon_without_title_is_accepted():
    data = {k: v for k, v in PUBLIC_ICON.items() if k != "title"}

    manifest = DisplayIconManifest.model_validate({"displayIcons": [data]})

    assert manifest.display_icons[0].title is None


def test_icon_missing_required_fields_is_rejected():
    with pytest.raises(ValidationError):
        DisplayIconManifest.model_validate({"displayIcons": [{"mediaId": "m3", "publicTags": []}]})

    with pytest.raises(ValidationError):
        DisplayIconManifest.model_validate({"displayIcons": ["not-an-icon"]})


def test_duplicate_icon_upload_has_object_url():
    response = IconUploadResponse.model_validate(
        {"displayIcon": {"mediaId": "m1", "new": False, "url": {}}}
    )

    assert response.display_icon.media_id == "m1"
    assert response.display_icon.url == {}


def test_card_round_trip_keeps_unknown_fields():
    data = {
        "cardId": "c1",
        "title": "T",
        "content": {
            "chapters": [
                {
                    "key": "00",
                    "title": "Ch",
                    "_originalFileName": "song",
                    "futureField": {"a": 1},
                    "tracks": [{"key": "01", "title": "Tr", "trackUrl": "yoto:#x", "extra": 5}],
                }
            ],
            "playbackType": "linear",
        },
    }

    dumped = Card.model_validate(data).model_dump(exclude_none=True)

    assert dumped == data
