"""Tests for image variant resolution and the download-all bundle."""

import asyncio
import io
import zipfile

import httpx

from storefront.content import images
from storefront.content.images import (
    DownloadedImage,
    ProjectImage,
    build_zip,
    download_filename,
    fetch_all_images,
    resolve_images,
    selected_image,
)
from storefront.db.models import Project

RED = "https://cdn.example.com/sword-red.png"
BLUE = "https://cdn.example.com/sword-blue.jpg"


def _project(**fields) -> Project:
    fields.setdefault("title", "Sword")
    return Project(**fields)


class TestResolveImages:
    def test_stored_images_win(self):
        project = _project(
            image_url="https://cdn.example.com/old.png",
            images=[{"url": RED, "color": "#ff0000", "name": "Red"}],
        )
        assert resolve_images(project) == [ProjectImage(url=RED, color="#ff0000", name="Red")]

    def test_falls_back_to_primary_url(self):
        project = _project(image_url=RED, images=[])
        assert resolve_images(project) == [ProjectImage(url=RED, color="#ffffff", name="Default")]

    def test_no_images_at_all(self):
        assert resolve_images(_project(image_url="", images=[])) == []
        assert resolve_images(_project()) == []


class TestSelectedImage:
    def test_index_in_range(self):
        project = _project(images=[{"url": RED, "color": "#f00", "name": "Red"},
                                   {"url": BLUE, "color": "#00f", "name": "Blue"}])
        assert selected_image(project, 1).url == BLUE

    def test_out_of_range_falls_back_to_first(self):
        project = _project(images=[{"url": RED, "color": "#f00", "name": "Red"}])
        assert selected_image(project, 5).url == RED

    def test_no_images(self):
        assert selected_image(_project()) is None


class TestDownloadFilename:
    def test_uses_variant_name(self):
        image = ProjectImage(url=RED, color="#f00", name="Red")
        assert download_filename("Sword", image, 1) == "Sword-Red.png"

    def test_uses_position_without_name(self):
        image = ProjectImage(url=BLUE, color="#00f", name="")
        assert download_filename("Sword", image, 2) == "Sword-2.jpg"

    def test_empty_extension_defaults_to_png(self):
        image = ProjectImage(url="https://cdn.example.com/render.", color="#fff", name="X")
        assert download_filename("Sword", image, 1) == "Sword-X.png"

    def test_url_without_extension(self):
        image = ProjectImage(url="https://images.example.com/assets/12345", color="#fff", name="Default")
        assert download_filename("Sword", image, 1) == "Sword-Default.png"

    def test_query_string_ignored(self):
        image = ProjectImage(url="https://cdn.example.com/a/render.webp?v=2.1", color="#fff", name="")
        assert download_filename("Sword", image, 3) == "Sword-3.webp"

    def test_slashes_dropped_from_name(self):
        image = ProjectImage(url=RED, color="#f00", name="Red/Black")
        assert download_filename("Sword / Shield", image, 1) == "Sword  Shield-RedBlack.png"


class TestFetchAllImages:
    def _fetch(self, project, handler):
        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_all_images(project, client, delay_seconds=0)

        return asyncio.run(go())

    def test_fetches_variants_with_urls(self):
        project = _project(
            images=[
                {"url": RED, "color": "#f00", "name": "Red"},
                {"url": "", "color": "#0f0", "name": "Empty"},
                {"url": BLUE, "color": "#00f", "name": ""},
            ]
        )
        files = self._fetch(project, lambda request: httpx.Response(200, content=b"img"))
        assert [f.filename for f in files] == ["Sword-Red.png", "Sword-2.jpg"]
        assert all(f.content == b"img" for f in files)

    def test_failed_fetch_is_skipped(self):
        def handler(request):
            if str(request.url) == BLUE:
                return httpx.Response(500)
            return httpx.Response(200, content=b"red")

        project = _project(
            images=[
                {"url": RED, "color": "#f00", "name": "Red"},
                {"url": BLUE, "color": "#00f", "name": "Blue"},
            ]
        )
        files = self._fetch(project, handler)
        assert [f.filename for f in files] == ["Sword-Red.png"]

    def test_project_without_images(self):
        files = self._fetch(_project(), lambda request: httpx.Response(200))
        assert files == []

    def test_pauses_between_attempts_even_after_failure(self, monkeypatch):
        pauses = []

        async def fake_sleep(seconds):
            pauses.append(seconds)

        monkeypatch.setattr(images.asyncio, "sleep", fake_sleep)

        def handler(request):
            if str(request.url) == BLUE:
                return httpx.Response(500)
            return httpx.Response(200, content=b"img")

        project = _project(
            images=[
                {"url": BLUE, "color": "#00f", "name": "Blue"},
                {"url": RED, "color": "#f00", "name": "Red"},
                {"url": "https://cdn.example.com/sword-gold.png", "color": "#fc0", "name": "Gold"},
            ]
        )

        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_all_images(project, client, delay_seconds=0.3)

        files = asyncio.run(go())
        assert [f.filename for f in files] == ["Sword-Red.png", "Sword-Gold.png"]
        assert pauses == [0.3, 0.3]


class TestBuildZip:
    def test_archive_contains_every_file(self):
        data = build_zip([
            DownloadedImage(filename="Sword-Red.png", content=b"red"),
            DownloadedImage(filename="Sword-2.jpg", content=b"blue"),
        ])
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert sorted(archive.namelist()) == ["Sword-2.jpg", "Sword-Red.png"]
            assert archive.read("Sword-Red.png") == b"red"

    def test_clashing_names_are_numbered(self):
        data = build_zip([
            DownloadedImage(filename="Sword-Red.png", content=b"one"),
            DownloadedImage(filename="Sword-Red.png", content=b"two"),
            DownloadedImage(filename="Sword-Red.png", content=b"three"),
        ])
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == ["Sword-Red.png", "Sword-Red-2.png", "Sword-Red-3.png"]
            assert archive.read("Sword-Red-2.png") == b"two"

    def test_same_variant_names_survive_the_round_trip(self):
        project = _project(
            images=[
                {"url": RED, "color": "#f00", "name": "Red"},
                {"url": "https://cdn.example.com/sword-dark-red.png", "color": "#900", "name": "Red"},
            ]
        )

        def handler(request):
            return httpx.Response(200, content=request.url.path.encode())

        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_all_images(project, client, delay_seconds=0)

        with zipfile.ZipFile(io.BytesIO(build_zip(asyncio.run(go())))) as archive:
            assert len(archive.namelist()) == 2
            assert archive.read("Sword-Red-2.png") == b"/sword-dark-red.png"
