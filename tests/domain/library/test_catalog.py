"""Tests for catalog operations that combine rows and asset files."""

from unittest.mock import patch

import pytest

from score_library.domain.assets import AssetCategory, decode_base64
from score_library.domain.library import (
    ComposerUpdate,
    EntityNotFoundError,
    RecordingUpdate,
    WorkUpdate,
    attach_file,
    delete_composer,
    delete_recording,
    delete_work,
    list_composers_for_display,
)


@pytest.fixture
def score_file(tmp_path):
    path = tmp_path / "incoming" / "wtc.PDF"
    path.parent.mkdir()
    path.write_bytes(b"%PDF-1.7 prelude")
    return path


class TestAttachFile:
    """Tests for attach_file."""

    def test_attach_to_work(self, local_repo, local_assets, score_file) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(composer.id, "WTC I")

        reference = attach_file(local_repo, local_assets, "work", work.id, score_file)

        assert reference == f"SML/sheets/{work.id}.pdf"
        assert local_repo.get_work(work.id).file_url == reference
        assert decode_base64(local_assets.read(reference)) == b"%PDF-1.7 prelude"

    def test_attach_avatar_to_composer(self, local_repo, local_assets, tmp_path) -> None:
        composer = local_repo.create_composer("Bach")
        image = tmp_path / "bach.jpg"
        image.write_bytes(b"jpeg")

        reference = attach_file(local_repo, local_assets, "composer", composer.id, image)

        assert reference.startswith("SML/avatars/")
        assert local_repo.get_composer(composer.id).image == reference

    def test_attach_recording(self, local_repo, local_assets, tmp_path) -> None:
        composer = local_repo.create_composer("Bach")
        recording = local_repo.create_recording(composer.id, "Goldberg")
        audio = tmp_path / "goldberg.mp3"
        audio.write_bytes(b"ID3")

        reference = attach_file(local_repo, local_assets, "recording", recording.id, audio)

        assert reference == f"SML/recordings/{recording.id}.mp3"

    def test_replacing_removes_previous_file(
        self, local_repo, local_assets, score_file, tmp_path
    ) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(composer.id, "WTC I")
        first = attach_file(local_repo, local_assets, "work", work.id, score_file)
        image = tmp_path / "scan.png"
        image.write_bytes(b"png")

        second = attach_file(local_repo, local_assets, "work", work.id, image)

        assert second.endswith(".png")
        assert not local_assets.exists(first)
        assert local_assets.exists(second)

    @patch("score_library.domain.library.catalog.logger")
    def test_warns_when_file_family_does_not_match_kind(
        self, mock_logger, local_repo, local_assets, tmp_path
    ) -> None:
        composer = local_repo.create_composer("Bach")
        recording = local_repo.create_recording(composer.id, "Goldberg")
        scan = tmp_path / "cover.pdf"
        scan.write_bytes(b"%PDF")

        reference = attach_file(local_repo, local_assets, "recording", recording.id, scan)

        assert reference == f"SML/recordings/{recording.id}.pdf"
        mock_logger.warning.assert_called_once()
        assert "looks like a sheet file" in mock_logger.warning.call_args.args[0]

    @patch("score_library.domain.library.catalog.logger")
    def test_matching_family_does_not_warn(
        self, mock_logger, local_repo, local_assets, score_file
    ) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(composer.id, "WTC I")

        attach_file(local_repo, local_assets, "work", work.id, score_file)

        mock_logger.warning.assert_not_called()

    @patch("score_library.domain.library.catalog.logger")
    def test_foreign_previous_reference_is_left_alone(
        self, mock_logger, local_repo, local_assets, score_file
    ) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(
            composer.id, "WTC I", file_url="https://cdn.example/wtc.pdf"
        )

        attach_file(local_repo, local_assets, "work", work.id, score_file)

        assert local_repo.get_work(work.id).file_url == f"SML/sheets/{work.id}.pdf"
        mock_logger.warning.assert_not_called()

    def test_unknown_kind(self, local_repo, local_assets, score_file) -> None:
        with pytest.raises(ValueError, match="Invalid kind"):
            attach_file(local_repo, local_assets, "album", "x", score_file)

    def test_unknown_entity_writes_nothing(
        self, local_repo, local_assets, score_file
    ) -> None:
        with pytest.raises(EntityNotFoundError):
            attach_file(local_repo, local_assets, "work", "nope", score_file)

        assert local_assets.storage_usage().total == 0


class TestDeletes:
    """Tests for delete_composer / delete_work / delete_recording."""

    def test_delete_composer_removes_files_and_rows(self, local_repo, local_assets) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(composer.id, "Mass")
        recording = local_repo.create_recording(composer.id, "Mass (live)")
        avatar = local_assets.write_bytes(b"img", AssetCategory.AVATAR, composer.id, "png")
        sheet = local_assets.write_bytes(b"pdf", AssetCategory.SHEET, work.id, "pdf")
        audio = local_assets.write_bytes(b"mp3", AssetCategory.RECORDING, recording.id, "mp3")
        local_repo.update_composer(composer.id, ComposerUpdate(image=avatar))
        local_repo.update_work(work.id, WorkUpdate(file_url=sheet))
        local_repo.update_recording(recording.id, RecordingUpdate(file_url=audio))

        delete_composer(local_repo, local_assets, composer.id)

        assert local_repo.list_composers() == []
        assert local_repo.list_works() == []
        assert local_repo.list_recordings() == []
        assert local_assets.storage_usage().total == 0

    def test_missing_file_does_not_block_delete(self, local_repo, local_assets) -> None:
        composer = local_repo.create_composer("Bach")
        work = local_repo.create_work(composer.id, "Mass", file_url="SML/sheets/gone.pdf")

        delete_work(local_repo, local_assets, work.id)

        assert local_repo.list_works() == []

    def test_foreign_reference_does_not_block_delete(self, local_repo, local_assets) -> None:
        composer = local_repo.create_composer("Bach")
        recording = local_repo.create_recording(
            composer.id, "Mass", file_url="https://cdn.example/mass.mp3"
        )

        delete_recording(local_repo, local_assets, recording.id)

        assert local_repo.list_recordings() == []

    def test_delete_missing_composer(self, local_repo, local_assets) -> None:
        with pytest.raises(EntityNotFoundError):
            delete_composer(local_repo, local_assets, "nope")


class TestListForDisplay:
    """Tests for list_composers_for_display."""

    def test_images_resolve_to_file_uris(self, local_repo, local_assets) -> None:
        with_image = local_repo.create_composer("Bach")
        local_repo.create_composer("Ravel")
        avatar = local_assets.write_bytes(b"img", AssetCategory.AVATAR, with_image.id, "png")
        local_repo.update_composer(with_image.id, ComposerUpdate(image=avatar))

        composers = {c.name: c for c in list_composers_for_display(local_repo, local_assets)}

        assert composers["Bach"].image.startswith("file://")
        assert composers["Bach"].image.endswith(f"{with_image.id}.png")
        assert composers["Ravel"].image == ""

    def test_missing_image_displays_empty(self, local_repo, local_assets) -> None:
        composer = local_repo.create_composer("Bach")
        local_repo.update_composer(composer.id, ComposerUpdate(image="SML/avatars/gone.png"))

        [listed] = list_composers_for_display(local_repo, local_assets)

        assert listed.image == ""
        assert local_repo.get_composer(composer.id).image == "SML/avatars/gone.png"
