"""Tests for scrotmenu.dispatch."""

from unittest import mock

import pytest

from scrotmenu.capture import CaptureSession
from scrotmenu.choice import CopyToClipboard, OpenWith, SaveAs, Upload
from scrotmenu.dispatch import DispatchOutcome, default_uploader, dispatch
from scrotmenu.errors import DispatchError, SpawnError, UploadError
from scrotmenu.notify import Notifier
from scrotmenu.upload import ImgurClient, UploadResult
from tests.conftest import completed

LINK = "https://i.imgur.com/abc123.png"


@pytest.fixture
def session(capture_file):
    return CaptureSession(capture_file)


@pytest.fixture
def notifier():
    return mock.Mock(spec=Notifier)


def uploader_returning(result=None, error=None):
    client = mock.Mock(spec=ImgurClient)
    if error is not None:
        client.upload.side_effect = error
    else:
        client.upload.return_value = result
    return lambda config: client


class TestUpload:
    @pytest.fixture(autouse=True)
    def upload_config(self, config):
        config.imgur_client_id = "client-id"
        return config

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_link_copied_and_announced(self, mock_copy, session, config, notifier):
        make_uploader = uploader_returning(UploadResult(link=LINK))

        outcome = dispatch(Upload(), session, config, notifier, make_uploader)

        assert outcome == DispatchOutcome("upload", LINK)
        mock_copy.assert_called_once_with(LINK, config)
        summary, body, _icon = notifier.send.call_args.args
        assert summary == "Upload complete"
        assert LINK in body

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_uploads_file_bytes(self, mock_copy, session, config, notifier, capture_file):
        client = mock.Mock(spec=ImgurClient)
        client.upload.return_value = UploadResult(link=LINK)

        dispatch(Upload(), session, config, notifier, lambda c: client)

        client.upload.assert_called_once_with(capture_file.read_bytes())

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_no_link(self, mock_copy, session, config, notifier):
        make_uploader = uploader_returning(UploadResult(link=None))

        outcome = dispatch(Upload(), session, config, notifier, make_uploader)

        assert outcome == DispatchOutcome("upload")
        mock_copy.assert_not_called()
        notifier.send.assert_called_once()
        assert notifier.send.call_args.args[1] == "No link returned"

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_failure_notifies_then_raises(self, mock_copy, session, config, notifier):
        make_uploader = uploader_returning(error=UploadError("Upload rejected (HTTP 403): Invalid client"))

        with pytest.raises(DispatchError, match="Invalid client"):
            dispatch(Upload(), session, config, notifier, make_uploader)

        mock_copy.assert_not_called()
        summary, body, _icon = notifier.send.call_args.args
        assert summary == "Upload failed"
        assert "Invalid client" in body

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_notification_failure_does_not_mask_success(self, mock_copy, session, config, notifier):
        notifier.send.return_value = False

        outcome = dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

        assert outcome.detail == LINK

    @mock.patch("scrotmenu.dispatch.time.sleep")
    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_grace_period_after_copy(self, mock_copy, mock_sleep, session, config, notifier):
        config.clipboard_grace_seconds = 20

        dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

        mock_sleep.assert_called_once_with(20)

    @mock.patch("scrotmenu.dispatch.time.sleep")
    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_no_grace_period_by_default(self, mock_copy, mock_sleep, session, config, notifier):
        dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

        mock_sleep.assert_not_called()

    @mock.patch("scrotmenu.clipboard.copy_text")
    def test_clipboard_failure(self, mock_copy, session, config, notifier):
        mock_copy.side_effect = SpawnError("xclip", "command not found")

        with pytest.raises(DispatchError, match="clipboard"):
            dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

    def test_requires_client_id(self, session, config, notifier):
        config.imgur_client_id = None

        with pytest.raises(DispatchError, match="client id"):
            dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

    def test_missing_capture_file(self, session, config, notifier, capture_file):
        capture_file.unlink()

        with pytest.raises(DispatchError, match="Could not read capture"):
            dispatch(Upload(), session, config, notifier, uploader_returning(UploadResult(link=LINK)))

    def test_default_uploader(self, config):
        config.upload_timeout = 15

        client = default_uploader(config)

        assert client.client_id == "client-id"
        assert client.timeout == 15


class TestSaveAs:
    def test_copies_to_trimmed_destination(self, session, config, notifier, tmp_path, capture_file):
        destination = tmp_path / "out.png"

        outcome = dispatch(SaveAs(f"{destination} "), session, config, notifier)

        assert outcome == DispatchOutcome("save", str(destination))
        assert destination.read_bytes() == capture_file.read_bytes()
        notifier.send.assert_not_called()

    def test_invalid_destination(self, session, config, notifier, tmp_path):
        with pytest.raises(DispatchError, match="Could not save"):
            dispatch(SaveAs(str(tmp_path / "missing" / "out.png")), session, config, notifier)

    def test_blank_destination(self, session, config, notifier):
        with pytest.raises(DispatchError):
            dispatch(SaveAs("  "), session, config, notifier)


class TestOpenWith:
    @mock.patch("scrotmenu.tools.spawn_detached")
    def test_spawns_viewer_and_keeps_file(self, mock_spawn, session, config, notifier, capture_file):
        outcome = dispatch(OpenWith("feh"), session, config, notifier)

        assert outcome == DispatchOutcome("open", "feh")
        mock_spawn.assert_called_once_with(["feh", str(capture_file)])
        assert session.kept

    @mock.patch("scrotmenu.tools.spawn_detached")
    def test_spawn_failure(self, mock_spawn, session, config, notifier):
        mock_spawn.side_effect = SpawnError("nope", "command not found")

        with pytest.raises(DispatchError, match="Could not open nope"):
            dispatch(OpenWith("nope"), session, config, notifier)

        assert not session.kept


class TestCopyToClipboard:
    def test_pipes_image_to_clipboard(self, mock_run, session, config, notifier, capture_file):
        mock_run.return_value = completed(["xclip"])

        outcome = dispatch(CopyToClipboard(), session, config, notifier)

        assert outcome == DispatchOutcome("copy")
        argv = mock_run.call_args.args[0]
        assert argv == ["xclip", "-selection", "clipboard", "-t", "image/png"]
        assert mock_run.call_args.kwargs["input"] == capture_file.read_bytes()
        assert "capture_output" not in mock_run.call_args.kwargs

    def test_clipboard_tool_failure(self, mock_run, session, config, notifier):
        mock_run.return_value = completed(["xclip"], returncode=1)

        with pytest.raises(DispatchError):
            dispatch(CopyToClipboard(), session, config, notifier)


def test_unsupported_choice(session, config, notifier):
    with pytest.raises(DispatchError):
        dispatch(object(), session, config, notifier)
