"""Tests for content-type and category resolution."""

from score_library.domain.assets import (
    AssetCategory,
    content_type_for,
    extension_of,
    infer_category,
)


class TestContentTypeFor:
    """Tests for content_type_for."""

    def test_known_extensions(self) -> None:
        assert content_type_for("pdf") == "application/pdf"
        assert content_type_for("jpeg") == "image/jpeg"
        assert content_type_for("m4a") == "audio/mp4"
        assert content_type_for("ogg") == "audio/ogg"

    def test_dotted_extension(self) -> None:
        assert content_type_for(".png") == "image/png"

    def test_path(self) -> None:
        assert content_type_for("SML/recordings/abc.WAV") == "audio/wav"

    def test_unknown_is_octet_stream(self) -> None:
        assert content_type_for("xyz") == "application/octet-stream"
        assert content_type_for("notes.xyz") == "application/octet-stream"
        assert content_type_for("") == "application/octet-stream"


class TestExtensionOf:
    """Tests for extension_of."""

    def test_path(self) -> None:
        assert extension_of("SML/sheets/abc.PDF") == "pdf"

    def test_url_ignores_query(self) -> None:
        assert extension_of("https://cdn.example/a/b.mp3?token=1#t=3") == "mp3"

    def test_default_when_missing(self) -> None:
        assert extension_of("https://cdn.example/a/b") == "bin"
        assert extension_of("") == "bin"
        assert extension_of("README", default="txt") == "txt"

    def test_dot_in_directory_only(self) -> None:
        assert extension_of("https://host.example/v1.2/object") == "bin"


class TestInferCategory:
    """Tests for infer_category."""

    def test_directory_wins_over_extension(self) -> None:
        assert infer_category("SML/recordings/take.png") is AssetCategory.RECORDING
        assert infer_category("SML/avatars/score.pdf") is AssetCategory.AVATAR

    def test_extension_family(self) -> None:
        assert infer_category("downloads/prelude.pdf") is AssetCategory.SHEET
        assert infer_category("downloads/prelude.mp3") is AssetCategory.RECORDING
        assert infer_category("downloads/face.webp") is AssetCategory.AVATAR

    def test_unknown(self) -> None:
        assert infer_category("downloads/archive.zip") is None
        assert infer_category("") is None


class TestAssetCategory:
    """Category directory and prefix table."""

    def test_layout(self) -> None:
        assert [(c.local_dir, c.remote_prefix) for c in AssetCategory] == [
            ("sheets", "sheets"),
            ("recordings", "audio"),
            ("avatars", "composers"),
        ]
