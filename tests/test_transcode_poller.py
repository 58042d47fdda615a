import asyncio

import pytest

from yoto_cli.api.models import TranscodedAudioResponse
from yoto_cli.errors import TranscodeFailedError, TranscodeTimeoutError
from yoto_cli.services.transcode_poller import TranscodeState, classify_job


def _job(**fields) -> TranscodedAudioResponse.Transcode:
    return TranscodedAudioResponse.Transcode.model_validate({"uploadId": "u1", **fields})


def test_completes_on_third_attempt(fake_client, poller, sleep):
    fake_client.transcode_script = ["queued", "processing", "complete"]

    result = asyncio.run(poller.poll_until_done("upload-1"))

    assert fake_client.transcode_calls == 3
    assert sleep.calls == [5.0, 5.0]
    assert result.upload_id == "upload-1"
    assert result.track_url == f"yoto:#{result.sha256}"
    assert result.duration == 125.0


def test_times_out_after_max_attempts(fake_client, poller, sleep):
    fake_client.transcode_script = ["processing"]

    with pytest.raises(TranscodeTimeoutError) as excinfo:
        asyncio.run(poller.poll_until_done("upload-1"))

    assert fake_client.transcode_calls == 60
    # no sleep after the last attempt
    assert len(sleep.calls) == 59
    assert "300 seconds" in str(excinfo.value)
    assert "yoto track status upload-1" in str(excinfo.value)
    assert excinfo.value.exit_code == 3


def test_unknown_phase_fails_with_phase_name(fake_client, poller):
    fake_client.transcode_script = ["queued", "error"]

    with pytest.raises(TranscodeFailedError) as excinfo:
        asyncio.run(poller.poll_until_done("upload-1"))

    assert excinfo.value.phase == "error"
    assert str(excinfo.value) == "Transcoding failed with status: error"
    assert fake_client.transcode_calls == 2


def test_no_wait_returns_only_upload_id(fake_client, poller):
    result = asyncio.run(poller.poll_until_done("upload-1", wait=False))

    assert result.upload_id == "upload-1"
    assert result.track_url is None
    assert fake_client.transcode_calls == 0


def test_transcoding_phase_is_still_in_progress(fake_client, poller):
    fake_client.transcode_script = ["transcoding", "complete"]

    result = asyncio.run(poller.poll_until_done("upload-1"))

    assert result.track_url is not None
    assert fake_client.transcode_calls == 2


def test_missing_job_is_retried(fake_client, poller):
    fake_client.transcode_script = ["missing", "missing", "complete"]

    result = asyncio.run(poller.poll_until_done("upload-1"))

    assert result.track_url is not None
    assert fake_client.transcode_calls == 3


def test_classify_job():
    assert classify_job(_job(progress={"phase": "queued"})) is TranscodeState.PENDING
    assert classify_job(_job()) is TranscodeState.PENDING
    assert classify_job(_job(progress={"phase": "complete"})) is TranscodeState.COMPLETE
    assert classify_job(_job(progress={"phase": "failed"})) is TranscodeState.FAILED
    # a transcoded digest wins over a stale phase
    assert (
        classify_job(_job(progress={"phase": "processing"}, transcodedSha256="abc"))
        is TranscodeState.COMPLETE
    )
