"""Tests for manifest parsing and loading."""

import json
from pathlib import Path

import pytest

from core.assets import AssetFetcher
from core.config import PlayerConfig
from core.errors import AssetLoadError, ManifestLoadError
from core.manifest import load_manifest, load_tracks, parse_manifest, parse_track
from core.models import DEFAULT_THEME, ColorTheme


@pytest.fixture
def manifest_doc():
    return {
        "tracks": [
            {
                "id": 1,
                "title": "Night Drive",
                "artist": "Synth Unit",
                "album": "Roads",
                "duration": "3:45",
                "image": "images/night.jpg",
                "audio": "audio/night.mp3",
                "colors": {"primary": "#FF0000", "accent": "#00ff00"},
            },
            {
                "id": 2,
                "title": "Silent Film",
                "artist": "Projector",
                "album": "Reels",
                "duration": "2:10",
                "image": "https://cdn.example.com/silent.jpg",
            },
        ]
    }


class TestParseTrack:
    def test_fallbacks_for_missing_fields(self, tmp_path):
        track = parse_track({}, str(tmp_path), position=4)

        assert track.track_id == 5
        assert track.title == "Track 5"
        assert track.artist == "Unknown Artist"
        assert track.album == "Unknown Album"
        assert track.duration_label == "0:00"
        assert track.image_ref is None
        assert track.audio_ref is None
        assert track.colors == DEFAULT_THEME
        assert not track.has_audio

    def test_blank_strings_use_fallbacks(self, tmp_path):
        track = parse_track({"title": "   ", "artist": ""}, str(tmp_path), position=0)
        assert track.title == "Track 1"
        assert track.artist == "Unknown Artist"


class TestParseManifest:
    def test_local_refs_resolve_against_root(self, tmp_path, manifest_doc):
        tracks = parse_manifest(manifest_doc, str(tmp_path))

        assert len(tracks) == 2
        first = tracks[0]
        assert first.title == "Night Drive"
        assert Path(first.audio_ref) == (tmp_path / "audio" / "night.mp3").resolve()
        assert Path(first.image_ref) == (tmp_path / "images" / "night.jpg").resolve()

    def test_remote_refs_pass_through(self, tmp_path, manifest_doc):
        tracks = parse_manifest(manifest_doc, str(tmp_path))
        assert tracks[1].image_ref == "https://cdn.example.com/silent.jpg"
        assert tracks[1].audio_ref is None

    def test_remote_root(self, manifest_doc):
        tracks = parse_manifest(manifest_doc, "https://music.example.com/player")
        assert tracks[0].audio_ref == "https://music.example.com/player/audio/night.mp3"

    def test_colors_partial_override(self, tmp_path, manifest_doc):
        colors = parse_manifest(manifest_doc, str(tmp_path))[0].colors
        assert colors.primary == "#ff0000"
        assert colors.accent == "#00ff00"
        assert colors.dark == DEFAULT_THEME.dark

    def test_order_preserved(self, tmp_path):
        doc = {"tracks": [{"id": n, "title": f"T{n}"} for n in (3, 1, 2)]}
        assert [t.track_id for t in parse_manifest(doc, str(tmp_path))] == [3, 1, 2]

    def test_duplicate_ids_skipped(self, tmp_path):
        doc = {"tracks": [{"id": 1, "title": "A"}, {"id": 1, "title": "B"}, {"id": 2, "title": "C"}]}
        tracks = parse_manifest(doc, str(tmp_path))
        assert [t.title for t in tracks] == ["A", "C"]

    def test_malformed_id_does_not_steal_a_real_id(self, tmp_path):
        doc = {"tracks": [{"id": "a", "title": "Loose"}, {"id": 1, "title": "First"}, {"title": "No id"}]}
        tracks = parse_manifest(doc, str(tmp_path))

        assert [t.title for t in tracks] == ["Loose", "First", "No id"]
        assert [t.track_id for t in tracks] == [2, 1, 3]

    @pytest.mark.parametrize("bad_ref", [5, ["x"], {"src": "a.mp3"}, True])
    def test_non_string_asset_ref_is_dropped(self, tmp_path, caplog, bad_ref):
        doc = {"tracks": [
            {"id": 1, "title": "Good", "audio": "a.mp3", "image": "a.jpg"},
            {"id": 2, "title": "Odd", "audio": bad_ref, "image": bad_ref},
        ]}

        tracks = parse_manifest(doc, str(tmp_path))

        assert [t.title for t in tracks] == ["Good", "Odd"]
        assert tracks[0].has_audio
        assert tracks[1].audio_ref is None
        assert tracks[1].image_ref is None
        assert not tracks[1].has_audio
        assert "Ignoring audio of manifest entry 1" in caplog.text
        assert "Ignoring image of manifest entry 1" in caplog.text

    def test_non_object_entries_skipped(self, tmp_path):
        doc = {"tracks": ["junk", {"id": 7, "title": "Real"}, 42]}
        tracks = parse_manifest(doc, str(tmp_path))
        assert [t.track_id for t in tracks] == [7]

    def test_empty_tracks(self, tmp_path):
        assert parse_manifest({"tracks": []}, str(tmp_path)) == []

    @pytest.mark.parametrize("doc", [[], "tracks", {"songs": []}, {"tracks": {"id": 1}}])
    def test_bad_document_raises(self, tmp_path, doc):
        with pytest.raises(ManifestLoadError):
            parse_manifest(doc, str(tmp_path))


class TestColorTheme:
    def test_invalid_values_fall_back(self):
        theme = ColorTheme.from_dict({"primary": "red", "muted": "#12345", "light": "#ABCDEF"})
        assert theme.primary == DEFAULT_THEME.primary
        assert theme.muted == DEFAULT_THEME.muted
        assert theme.light == "#abcdef"

    def test_not_a_mapping(self):
        assert ColorTheme.from_dict(None) == DEFAULT_THEME
        assert ColorTheme.from_dict(["#ffffff"]) == DEFAULT_THEME

    def test_as_dict_has_six_colors(self):
        assert set(DEFAULT_THEME.as_dict()) == {"primary", "secondary", "accent", "muted", "dark", "light"}


class TestLoading:
    def test_load_tracks_from_directory(self, tmp_path, manifest_doc):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "tracks.json").write_text(json.dumps(manifest_doc), encoding="utf-8")
        config = PlayerConfig(root=str(tmp_path))

        tracks = load_tracks(config)

        assert [t.title for t in tracks] == ["Night Drive", "Silent Film"]

    def test_bad_field_keeps_the_rest_of_the_list(self, tmp_path):
        doc = {"tracks": [{"id": 1, "title": "A", "image": ["x"]}, {"id": 2, "title": "B"}]}
        (tmp_path / "tracks.json").write_text(json.dumps(doc), encoding="utf-8")
        config = PlayerConfig(root=str(tmp_path), manifest="tracks.json")

        tracks = load_tracks(config)

        assert [t.title for t in tracks] == ["A", "B"]
        assert tracks[0].image_ref is None

    def test_missing_manifest_gives_empty_list(self, tmp_path, caplog):
        config = PlayerConfig(root=str(tmp_path))
        assert load_tracks(config) == []
        assert "Error loading tracks" in caplog.text

    def test_invalid_json_gives_empty_list(self, tmp_path):
        (tmp_path / "tracks.json").write_text("{not json", encoding="utf-8")
        config = PlayerConfig(root=str(tmp_path), manifest="tracks.json")
        assert load_tracks(config) == []

    def test_load_manifest_wraps_fetch_errors(self, tmp_path):
        fetcher = AssetFetcher()
        try:
            with pytest.raises(ManifestLoadError) as excinfo:
                load_manifest(str(tmp_path / "missing.json"), str(tmp_path), fetcher)
        finally:
            fetcher.close()
        assert isinstance(excinfo.value.__cause__, AssetLoadError)


class TestAssetFetcher:
    def test_reads_local_file_and_file_url(self, tmp_path):
        target = tmp_path / "blob.bin"
        target.write_bytes(b"\x00\x01\x02")
        fetcher = AssetFetcher()
        try:
            assert fetcher.fetch_bytes(str(target)) == b"\x00\x01\x02"
            assert fetcher.fetch_bytes(target.as_uri()) == b"\x00\x01\x02"
        finally:
            fetcher.close()

    def test_missing_file_raises_asset_error(self, tmp_path):
        fetcher = AssetFetcher()
        try:
            with pytest.raises(AssetLoadError) as excinfo:
                fetcher.fetch_bytes(str(tmp_path / "nope.mp3"))
        finally:
            fetcher.close()
        assert excinfo.value.url.endswith("nope.mp3")
