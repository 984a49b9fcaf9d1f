from __future__ import annotations

import numpy as np
import pytest

from scenekv.io.image import decode_image_document, encode_depth_payload, encode_image_payload, image_document
from scenekv.registry import ModelRegistry
from scenekv.store.memory import InMemoryStore


def test_encode_rgb_png_round_trip() -> None:
    img = np.zeros((4, 5, 3), dtype=np.uint8)
    img[..., 0] = 200
    data, mime, w, h, c = encode_image_payload(img)
    assert (mime, w, h, c) == ("image/png", 5, 4, 3)

    doc = image_document(data, mime_type=mime, width=w, height=h, channels=c)
    decoded = decode_image_document(doc)
    np.testing.assert_array_equal(decoded, img)


def test_bgr_input_is_swapped() -> None:
    img = np.zeros((2, 2, 3), dtype=np.uint8)
    img[..., 0] = 255  # blue in BGR
    data, mime, w, h, c = encode_image_payload(img, color_order="bgr")
    decoded = decode_image_document(image_document(data, mime_type=mime, width=w, height=h, channels=c))
    assert decoded[0, 0].tolist() == [0, 0, 255]


def test_float_images_are_scaled() -> None:
    img = np.full((2, 2), 0.5, dtype=np.float32)
    data, _mime, _w, _h, c = encode_image_payload(img)
    assert c == 1
    decoded = decode_image_document({"data": image_document(data, mime_type="image/png", width=2, height=2, channels=1)["data"]})
    assert int(decoded[0, 0]) == 127


def test_invalid_images_are_rejected() -> None:
    with pytest.raises(ValueError):
        encode_image_payload(np.zeros((2, 2, 2), dtype=np.uint8))
    with pytest.raises(ValueError):
        encode_image_payload(np.zeros(4, dtype=np.uint8))
    with pytest.raises(ValueError):
        encode_image_payload(np.zeros((2, 2, 3), dtype=np.uint8), mime_type="image/gif")
    with pytest.raises(ValueError):
        encode_image_payload(np.zeros((2, 2, 3), dtype=np.uint8), color_order="hsv")


def test_depth_is_stored_as_scaled_uint16() -> None:
    depth = np.array([[0.5, 1.25], [np.nan, -1.0]])
    data, w, h = encode_depth_payload(depth)
    assert (w, h) == (2, 2)
    decoded = decode_image_document({"data": image_document(data, mime_type="image/png", width=w, height=h, channels=1)["data"]})
    assert decoded.tolist() == [[500, 1250], [0, 0]]

    with pytest.raises(ValueError):
        encode_depth_payload(depth, scale=0.0)


def test_registry_publishes_camera_streams(registry: ModelRegistry, store: InMemoryStore) -> None:
    registry.publish_image("cam::rgb", np.zeros((3, 4, 3), dtype=np.uint8))
    registry.publish_depth_image("cam::depth", np.ones((3, 4)), scale=100.0)
    registry.publish_intrinsics("cam::K", np.eye(3), commit=True)

    rgb = store.get_now("cam::rgb")
    assert (rgb["mimeType"], rgb["width"], rgb["height"], rgb["channels"]) == ("image/png", 4, 3, 3)
    depth = store.get_now("cam::depth")
    assert depth["depthScale"] == 100.0
    assert int(decode_image_document(depth)[0, 0]) == 100
    assert store.get_now("cam::K") == np.eye(3).tolist()

    with pytest.raises(ValueError):
        registry.publish_intrinsics("cam::K", np.eye(4))
