"""Project image variants and the "download all images" bundle.

Projects created before multi-variant support only carry `image_url`.
resolve_images() turns either shape into one list of variants; the
portfolio grid, admin preview and viewer all go through it.
"""

import asyncio
import logging
import zipfile
from dataclasses import dataclass
from io import BytesIO
from urllib.parse import urlparse

import httpx

from storefront.db.models import Project

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_COLOR = "#ffffff"
DEFAULT_VARIANT_NAME = "Default"
DEFAULT_EXTENSION = "png"


@dataclass
class ProjectImage:
    """One colour/style variant of a project."""

    url: str
    color: str
    name: str

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectImage":
        return cls(
            url=data.get("url", ""),
            color=data.get("color", DEFAULT_VARIANT_COLOR),
            name=data.get("name", ""),
        )

    def to_dict(self) -> dict:
        return {"url": self.url, "color": self.color, "name": self.name}


@dataclass
class DownloadedImage:
    filename: str
    content: bytes


def resolve_images(project: Project) -> list[ProjectImage]:
    """Effective variant list for a project.

    Stored images when present; otherwise a single "Default" variant built
    from the primary image URL; otherwise nothing.
    """
    if project.images:
        return [ProjectImage.from_dict(img) for img in project.images]
    if project.image_url:
        return [
            ProjectImage(
                url=project.image_url,
                color=DEFAULT_VARIANT_COLOR,
                name=DEFAULT_VARIANT_NAME,
            )
        ]
    return []


def selected_image(project: Project, index: int = 0) -> ProjectImage | None:
    """The variant at `index`, falling back to the first one."""
    images = resolve_images(project)
    if not images:
        return None
    if 0 <= index < len(images):
        return images[index]
    return images[0]


def _extension(url: str) -> str:
    last_segment = urlparse(url).path.rsplit("/", 1)[-1]
    if "." not in last_segment:
        return DEFAULT_EXTENSION
    return last_segment.rsplit(".", 1)[-1] or DEFAULT_EXTENSION


def download_filename(title: str, image: ProjectImage, position: int) -> str:
    """`{title}-{name or position}.{extension}`, position being 1-based.

    The extension comes from the last path segment of the URL, `png` when
    that segment has none. Slashes are dropped so the name stays a single
    archive entry.
    """
    stem = f"{title}-{image.name or position}".replace("/", "")
    return f"{stem}.{_extension(image.url)}"


def _unique_name(filename: str, taken: set[str]) -> str:
    if filename not in taken:
        return filename
    stem, dot, extension = filename.rpartition(".")
    if not dot:
        stem, extension = filename, ""
    suffix = 2
    while f"{stem}-{suffix}{dot}{extension}" in taken:
        suffix += 1
    return f"{stem}-{suffix}{dot}{extension}"


async def fetch_all_images(
    project: Project,
    client: httpx.AsyncClient,
    delay_seconds: float = 0.3,
) -> list[DownloadedImage]:
    """Fetch every variant that has a URL, pausing between fetches.

    A failed fetch is logged and skipped; the rest still download. The pause
    applies after failed attempts too.
    """
    images = [img for img in resolve_images(project) if img.url]
    downloaded = []

    for position, image in enumerate(images, start=1):
        if position > 1 and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        try:
            response = await client.get(image.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Download failed for {image.url}: {e}")
            continue

        downloaded.append(
            DownloadedImage(
                filename=download_filename(project.title, image, position),
                content=response.content,
            )
        )

    logger.info(f"Fetched {len(downloaded)}/{len(images)} images for project {project.id}")
    return downloaded


def build_zip(files: list[DownloadedImage]) -> bytes:
    """Bundle the files; a clashing name gets `-2`, `-3`... before its extension."""
    buffer = BytesIO()
    taken: set[str] = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for f in files:
            name = _unique_name(f.filename, taken)
            taken.add(name)
            archive.writestr(name, f.content)
    return buffer.getvalue()
