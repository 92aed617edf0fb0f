"""
Unit tests for the file loader and the request handlers.
"""

import json
from pathlib import Path

import pytest

from minihttp.config import ConfigurationError
from minihttp.handlers import (
    Character,
    CharacterDataset,
    DatasetError,
    FileLoader,
    JsonServiceHandler,
    NotFoundHandler,
    ResourceNotFound,
    StaticFileHandler,
)
from minihttp.http.request import HTTPRequest, Method


def make_request(path: str) -> HTTPRequest:
    return HTTPRequest(method=Method.GET, resource=path)


@pytest.fixture
def loader(public_dir: Path) -> FileLoader:
    return FileLoader(public_dir)


@pytest.fixture
def not_found(loader: FileLoader) -> NotFoundHandler:
    return NotFoundHandler(loader)


@pytest.fixture
def static(loader: FileLoader, not_found: NotFoundHandler) -> StaticFileHandler:
    return StaticFileHandler(loader, not_found)


@pytest.fixture
def dataset(data_dir: Path) -> CharacterDataset:
    return CharacterDataset(data_dir)


@pytest.fixture
def api(dataset: CharacterDataset, not_found: NotFoundHandler) -> JsonServiceHandler:
    return JsonServiceHandler(dataset, not_found)


class TestFileLoader:

    def test_text_file_loaded_as_str(self, loader: FileLoader, site):
        assert loader.load("style.css") == site.style

    def test_binary_file_loaded_as_bytes(self, loader: FileLoader, site):
        assert loader.load("logo.png") == site.png

    def test_as_text_override(self, loader: FileLoader, site):
        assert loader.load("style.css", as_text=False) == site.style.encode()

    def test_missing_file(self, loader: FileLoader):
        with pytest.raises(ResourceNotFound):
            loader.load("missing.html")

    def test_directory_is_not_a_file(self, loader: FileLoader, public_dir: Path):
        (public_dir / "docs").mkdir()

        with pytest.raises(ResourceNotFound):
            loader.load("docs")
        assert not loader.exists("docs")

    def test_path_outside_root_rejected(self, loader: FileLoader, tmp_path: Path):
        (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")

        with pytest.raises(ResourceNotFound) as exc_info:
            loader.load("../secret.txt")

        assert exc_info.value.reason == "outside root"

    def test_exists(self, loader: FileLoader):
        assert loader.exists("index.html")
        assert not loader.exists("missing.html")
        assert not loader.exists("../data/characters.json")

    def test_require_missing_file(self, loader: FileLoader):
        with pytest.raises(ConfigurationError):
            loader.require("missing.html")


class TestNotFoundHandler:

    def test_returns_404_page(self, not_found: NotFoundHandler, site):
        response = not_found.handle(make_request("/nope"))

        assert response.status_code == "404"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == site.not_found

    def test_page_with_other_status(self, not_found: NotFoundHandler, site):
        response = not_found.page("400")

        assert response.status_code == "400"
        assert response.body == site.not_found

    def test_missing_page_is_configuration_error(self, not_found: NotFoundHandler, public_dir: Path):
        (public_dir / "404.html").unlink()

        with pytest.raises(ConfigurationError):
            not_found.check()
        with pytest.raises(ConfigurationError):
            not_found.handle(make_request("/nope"))


class TestStaticFileHandler:

    def test_serves_target(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/"), "index.html")

        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == site.index

    def test_falls_back_to_request_path(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/health.html"))

        assert response.body == site.health

    def test_empty_path_serves_index(self, static: StaticFileHandler, site):
        assert static.handle(make_request("/")).body == site.index

    def test_css_content_type(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/style.css"), "style.css")

        assert response.headers == {"Content-Type": "text/css"}
        assert response.body == site.style

    def test_binary_file(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/logo.png"), "logo.png")

        assert response.headers == {"Content-Type": "image/png"}
        assert response.body == site.png
        assert response.is_binary

    def test_crlf_text_file_served_verbatim(self, static: StaticFileHandler, public_dir: Path):
        content = b"line one\r\nline two\r\n"
        (public_dir / "notes.txt").write_bytes(content)

        response = static.handle(make_request("/notes.txt"), "notes.txt")

        assert response.headers == {"Content-Type": "text/plain"}
        assert response.body_bytes == content
        assert response.content_length == len(content)

    def test_extensionless_name_gets_html(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/health"), "health")

        assert response.status_code == "200"
        assert response.body == site.health

    def test_unknown_extension_serves_unsupported_page(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/report.docx"), "report.docx")

        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == site.unsupported

    def test_missing_file_is_404(self, static: StaticFileHandler, site):
        response = static.handle(make_request("/about"), "about")

        assert response.status_code == "404"
        assert response.body == site.not_found

    def test_traversal_is_404(self, static: StaticFileHandler, tmp_path: Path, site):
        (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")

        response = static.handle(make_request("/../secret.txt"), "../secret.txt")

        assert response.status_code == "404"
        assert response.body == site.not_found


class TestCharacterDataset:

    def test_load(self, dataset: CharacterDataset):
        characters = dataset.load()

        assert [c.name for c in characters] == ["Ayla", "Borin"]
        assert characters[0] == Character(
            name="Ayla",
            level=12,
            health=87.5,
            element="Fire",
            skills=["Flame Lash", "Ember"],
        )

    def test_integer_health_read_as_float(self, dataset: CharacterDataset):
        health = dataset.load()[1].health

        assert health == 120.0
        assert isinstance(health, float)

    def test_edits_are_picked_up(self, dataset: CharacterDataset, data_dir: Path, site):
        (data_dir / "characters.json").write_text(json.dumps(site.characters[:1]), encoding="utf-8")

        assert len(dataset.load()) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(DatasetError):
            CharacterDataset(tmp_path).load()

    @pytest.mark.parametrize("content", [
        "not json",
        '{"name": "Ayla"}',
        '[{"name": "Ayla"}]',
        '[{"name": "Ayla", "level": true, "health": 1, "element": "Fire", "skills": []}]',
        '[{"name": "Ayla", "level": 1, "health": "full", "element": "Fire", "skills": []}]',
        '[{"name": "Ayla", "level": 1, "health": 1, "element": "Fire", "skills": [1]}]',
        '["Ayla"]',
    ])
    def test_malformed_dataset(self, data_dir: Path, content: str):
        (data_dir / "characters.json").write_text(content, encoding="utf-8")

        with pytest.raises(DatasetError):
            CharacterDataset(data_dir).load()

    def test_dataset_error_is_configuration_error(self):
        assert issubclass(DatasetError, ConfigurationError)


class TestJsonServiceHandler:

    def test_characters(self, api: JsonServiceHandler, site):
        response = api.handle(make_request("/api/shipping/characters"), "/api/shipping/characters")

        expected = [dict(record, health=float(record["health"])) for record in site.characters]
        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "application/json"}
        assert json.loads(response.body) == expected
        assert response.body == json.dumps(expected, indent=2)

    def test_characters_with_trailing_slash(self, api: JsonServiceHandler, site):
        response = api.handle(make_request("/api/shipping/characters/"), "/api/shipping/characters/")

        assert response.status_code == "200"
        assert len(json.loads(response.body)) == len(site.characters)

    @pytest.mark.parametrize("path", [
        "/api",
        "/api/shipping",
        "/api/shipping/orders",
        "/api/shipping/characters/extra",
        "/api/shipping/characters//",
    ])
    def test_unknown_api_path_is_404(self, api: JsonServiceHandler, path: str, site):
        response = api.handle(make_request(path), path)

        assert response.status_code == "404"
        assert response.body == site.not_found

    def test_broken_dataset_raises(self, api: JsonServiceHandler, data_dir: Path):
        (data_dir / "characters.json").write_text("[", encoding="utf-8")

        with pytest.raises(DatasetError):
            api.handle(make_request("/api/shipping/characters"))
