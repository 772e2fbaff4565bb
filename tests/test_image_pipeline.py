"""
tests.test_image_pipeline

Upload validation and blob storage rules.
"""

from __future__ import annotations

import re

import pytest

from automation_hub.errors import (
    BlobStorageError,
    ImageTooLargeError,
    ImageTypeMismatchError,
    InvalidImageExtensionError,
    NotAnImageError,
    ValidationError,
)
from automation_hub.images.blob_store import BlobStore
from automation_hub.images.pipeline import ImagePipeline
from tests.conftest import MAX_IMAGE_SIZE, blob_names, image_bytes, make_upload


def test_store_accepts_png_under_generated_name(pipeline: ImagePipeline, blobs: BlobStore) -> None:
    data = image_bytes("PNG")

    name = pipeline.store(make_upload("../../etc/logo.png", data))

    assert re.fullmatch(r"[0-9a-f-]{36}\.png", name)
    assert blob_names(blobs) == {name}
    assert (blobs.root / name).read_bytes() == data


def test_declared_size_over_limit_is_rejected_without_writing(
    pipeline: ImagePipeline, blobs: BlobStore
) -> None:
    with pytest.raises(ImageTooLargeError) as excinfo:
        pipeline.store(make_upload("big.png", image_bytes("PNG"), size=MAX_IMAGE_SIZE + 1))

    assert excinfo.value.size == MAX_IMAGE_SIZE + 1
    assert excinfo.value.limit == MAX_IMAGE_SIZE
    assert str(MAX_IMAGE_SIZE) in str(excinfo.value)
    assert blob_names(blobs) == set()


def test_extension_outside_allow_list_is_rejected(pipeline: ImagePipeline) -> None:
    with pytest.raises(InvalidImageExtensionError):
        pipeline.store(make_upload("picture.bmp", image_bytes("BMP")))
    with pytest.raises(InvalidImageExtensionError):
        pipeline.store(make_upload("no_extension", image_bytes("PNG")))


def test_extension_match_is_case_insensitive(pipeline: ImagePipeline) -> None:
    name = pipeline.store(make_upload("LOGO.PNG", image_bytes("PNG")))
    assert name.endswith(".png")


def test_non_image_content_is_rejected(pipeline: ImagePipeline, blobs: BlobStore) -> None:
    with pytest.raises(NotAnImageError):
        pipeline.store(make_upload("notes.png", b"just some text, not a picture"))
    assert blob_names(blobs) == set()


def test_png_extension_with_gif_content_is_a_mismatch(
    pipeline: ImagePipeline, blobs: BlobStore
) -> None:
    with pytest.raises(ImageTypeMismatchError):
        pipeline.store(make_upload("renamed.png", image_bytes("GIF")))
    assert blob_names(blobs) == set()


def test_jpg_extension_accepts_jpeg_content(pipeline: ImagePipeline) -> None:
    assert pipeline.store(make_upload("photo.jpg", image_bytes("JPEG"))).endswith(".jpg")


def test_empty_file_is_rejected(pipeline: ImagePipeline) -> None:
    with pytest.raises(ValidationError):
        pipeline.store(make_upload("empty.png", b""))


def test_undecodable_image_with_valid_signature_is_still_accepted(
    pipeline: ImagePipeline, blobs: BlobStore
) -> None:
    data = b"\x89PNG\r\n\x1a\n" + b"\x00garbage" * 20

    name = pipeline.store(make_upload("broken.png", data))

    assert (blobs.root / name).read_bytes() == data


def test_delete_is_idempotent(pipeline: ImagePipeline, blobs: BlobStore) -> None:
    name = pipeline.store(make_upload("logo.png", image_bytes("PNG")))

    pipeline.delete(name)
    pipeline.delete(name)
    pipeline.delete("")

    assert blob_names(blobs) == set()


def test_write_failure_surfaces_and_leaves_no_blob(blobs: BlobStore) -> None:
    class Exploding:
        def read(self, *_: object) -> bytes:
            raise OSError("disk on fire")

    with pytest.raises(BlobStorageError):
        blobs.write("x.png", Exploding())  # type: ignore[arg-type]
    assert blob_names(blobs) == set()


@pytest.mark.parametrize("name", ["../secret.png", "a/b.png", "..", "", "sub\\x.png"])
def test_path_for_rejects_names_escaping_root(blobs: BlobStore, name: str) -> None:
    assert blobs.path_for(name) is None


def test_path_for_resolves_plain_names(blobs: BlobStore) -> None:
    assert blobs.path_for("abc.png") == (blobs.root / "abc.png").resolve()


def test_dotfile_name_uses_its_whole_name_as_extension(pipeline: ImagePipeline) -> None:
    assert pipeline.store(make_upload(".png", image_bytes("PNG"))).endswith(".png")
    assert pipeline.store(make_upload("uploads/.GIF", image_bytes("GIF"))).endswith(".gif")


def test_exists_only_for_stored_plain_names(pipeline: ImagePipeline, blobs: BlobStore) -> None:
    name = pipeline.store(make_upload("logo.png", image_bytes("PNG")))

    assert blobs.exists(name)
    assert not blobs.exists("missing.png")
    assert not blobs.exists(f"../{blobs.root.name}/{name}")

    pipeline.delete(name)
    assert not blobs.exists(name)
