from __future__ import annotations

import logging
import os
from concurrent.futures import wait
from typing import Any

import numpy as np

from .core.errors import DecodeError
from .core.interaction import Interaction
from .core.keys import AppKeys, ModelKeys, ModelKind, default_app_name
from .core.models import (
    CameraModel,
    Model,
    ObjectModel,
    RobotModel,
    TrajectoryModel,
    decode_model,
    encode_model,
)
from .core.transforms import as_quat, as_vec3
from .io.image import encode_depth_payload, encode_image_payload, image_document
from .store.base import StoreClient


logger = logging.getLogger(__name__)


class ModelRegistry:
    """Publishes model descriptors and live state for one web app.

    Writes are queued on the store; pass `commit=True` (or call `commit()`) to
    make them visible to the front-end. Store errors propagate unchanged.
    """

    def __init__(self, store: StoreClient, app: str | None = None) -> None:
        self.store = store
        self.app_keys = AppKeys(app or default_app_name())

    @property
    def app(self) -> str:
        return self.app_keys.app

    def model_keys(self, namespace: str) -> ModelKeys:
        return ModelKeys(namespace)

    def commit(self) -> None:
        self.store.commit()

    def _finish(self, commit: bool) -> None:
        if commit:
            self.store.commit()

    # Resources

    def register_resource_path(self, path: str | os.PathLike[str], commit: bool = False) -> str:
        """Allow the web server to serve files below `path`.

        The path is stored as an absolute path in `webapp::resources::<app>`.
        Registering the same path twice leaves the set unchanged.
        """
        p = os.path.abspath(os.fspath(path))
        self.store.sadd(self.app_keys.resources_key, [p])
        self._finish(commit)
        return p

    def unregister_resource_path(self, path: str | os.PathLike[str], commit: bool = False) -> str:
        p = os.path.abspath(os.fspath(path))
        self.store.srem(self.app_keys.resources_key, [p])
        self._finish(commit)
        return p

    def get_resource_paths(self) -> set[str]:
        fut = self.store.smembers(self.app_keys.resources_key)
        self.store.commit()
        return fut.result()

    # Namespace args

    def register_model_keys(self, model_keys: ModelKeys, commit: bool = False) -> None:
        self.store.set(self.app_keys.args_key(model_keys.key_namespace), model_keys.to_args())
        self._finish(commit)

    def unregister_model_keys(self, model_keys: ModelKeys, commit: bool = False) -> None:
        self.store.delete([self.app_keys.args_key(model_keys.key_namespace)])
        self._finish(commit)

    def get_model_keys(self, namespace: str) -> ModelKeys | None:
        fut = self.store.get(self.app_keys.args_key(namespace))
        self.store.commit()
        doc = fut.result()
        if doc is None:
            return None
        return ModelKeys.from_args(namespace, doc)

    def clear_model_keys(self, model_keys: ModelKeys, commit: bool = True) -> set[str]:
        """Delete every model registered under the namespace.

        Scans all four prefixes in one round trip and deletes the union. The
        scans are a snapshot: a model registered by another writer after the
        scans run can survive the clear. Returns the deleted keys.
        """
        futures = [self.store.scan(prefix + "*") for prefix in model_keys.prefixes().values()]
        self.store.commit()
        wait(futures)

        keys: set[str] = set()
        for fut in futures:
            keys.update(fut.result())
        self.store.delete(keys)
        self._finish(commit)
        logger.debug("cleared %d keys from namespace %r", len(keys), model_keys.key_namespace)
        return keys

    # Models

    def _register(self, model_keys: ModelKeys, kind: ModelKind, name: str, model: Model, commit: bool) -> str:
        key = model_keys.key_for(kind, name)
        self.store.set(key, encode_model(model, kind))
        self._finish(commit)
        logger.debug("registered %s %r at %s", kind.value, name, key)
        return key

    def register_robot(self, model_keys: ModelKeys, robot: RobotModel, commit: bool = False) -> str:
        return self._register(model_keys, ModelKind.ROBOT, robot.name, robot, commit)

    def register_object(self, model_keys: ModelKeys, obj: ObjectModel, commit: bool = False) -> str:
        return self._register(model_keys, ModelKind.OBJECT, obj.name, obj, commit)

    def register_trajectory(
        self,
        model_keys: ModelKeys,
        name: str,
        key_pos: str,
        commit: bool = False,
    ) -> str:
        traj = TrajectoryModel(name=name, key_pos=key_pos)
        return self._register(model_keys, ModelKind.TRAJECTORY, name, traj, commit)

    def register_camera(self, model_keys: ModelKeys, camera: CameraModel, commit: bool = False) -> str:
        return self._register(model_keys, ModelKind.CAMERA, camera.name, camera, commit)

    def _unregister(self, model_keys: ModelKeys, kind: ModelKind, name: str, commit: bool) -> None:
        self.store.delete([model_keys.key_for(kind, name)])
        self._finish(commit)

    def unregister_robot(self, model_keys: ModelKeys, name: str, commit: bool = False) -> None:
        self._unregister(model_keys, ModelKind.ROBOT, name, commit)

    def unregister_object(self, model_keys: ModelKeys, name: str, commit: bool = False) -> None:
        self._unregister(model_keys, ModelKind.OBJECT, name, commit)

    def unregister_trajectory(self, model_keys: ModelKeys, name: str, commit: bool = False) -> None:
        self._unregister(model_keys, ModelKind.TRAJECTORY, name, commit)

    def unregister_camera(self, model_keys: ModelKeys, name: str, commit: bool = False) -> None:
        self._unregister(model_keys, ModelKind.CAMERA, name, commit)

    def get_model(self, model_keys: ModelKeys, kind: ModelKind | str, name: str) -> Model | None:
        k = ModelKind.from_any(kind)
        fut = self.store.get(model_keys.key_for(k, name))
        self.store.commit()
        doc = fut.result()
        return None if doc is None else decode_model(k, doc)

    def list_models(self, model_keys: ModelKeys, kind: ModelKind | str) -> dict[str, Model]:
        """All models of one kind, keyed by name."""
        k = ModelKind.from_any(kind)
        prefix = model_keys.prefix(k)
        scan = self.store.scan(prefix + "*")
        self.store.commit()
        keys = sorted(scan.result())
        if not keys:
            return {}
        futures = [self.store.get(key) for key in keys]
        self.store.commit()
        out: dict[str, Model] = {}
        for key, fut in zip(keys, futures):
            doc = fut.result()
            if doc is None:
                # Deleted between scan and read.
                continue
            out[key[len(prefix):]] = decode_model(k, doc)
        return out

    # Interaction

    def get_interaction(self) -> Interaction | None:
        """Read the current interaction once; meant to be polled every tick.

        Returns None when the front-end has not written one yet.
        """
        fut = self.store.get(self.app_keys.interaction_key)
        self.store.commit()
        doc = fut.result()
        if doc is None:
            return None
        return Interaction.from_dict(doc)

    def publish_interaction(self, interaction: Interaction, commit: bool = False) -> None:
        self.store.set(self.app_keys.interaction_key, interaction.to_dict())
        self._finish(commit)

    def clear_interaction(self, commit: bool = False) -> None:
        self.store.delete([self.app_keys.interaction_key])
        self._finish(commit)

    # Live state

    def publish_pose(
        self,
        key_pos: str,
        key_ori: str | None,
        pos: Any,
        ori: Any | None = None,
        commit: bool = False,
    ) -> None:
        """Write a position (and optionally an xyzw orientation) to their keys."""
        p = as_vec3(pos, name="pos")
        self.store.set(key_pos, [float(x) for x in p])
        if key_ori:
            if ori is None:
                raise ValueError("ori is required when key_ori is given")
            q = as_quat(ori, name="ori")
            self.store.set(key_ori, [float(x) for x in q])
        self._finish(commit)

    def publish_configuration(self, key_q: str, q: Any, commit: bool = False) -> None:
        arr = np.asarray(q, dtype=np.float64).reshape(-1)
        if not np.all(np.isfinite(arr)):
            raise ValueError("q must contain finite numeric values")
        self.store.set(key_q, [float(x) for x in arr])
        self._finish(commit)

    def publish_trajectory(self, key_pos: str, points: Any, commit: bool = False) -> None:
        """Write a whole position series (N,3) for a trajectory."""
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"points must have shape (N,3), got {pts.shape}")
        self.store.set(key_pos, pts.tolist())
        self._finish(commit)

    def publish_image(
        self,
        key: str,
        image: np.ndarray,
        *,
        mime_type: str = "image/png",
        color_order: str = "rgb",
        commit: bool = False,
    ) -> None:
        data, mime, width, height, channels = encode_image_payload(image, mime_type=mime_type, color_order=color_order)
        self.store.set(key, image_document(data, mime_type=mime, width=width, height=height, channels=channels))
        self._finish(commit)

    def publish_depth_image(self, key: str, depth: np.ndarray, *, scale: float = 1000.0, commit: bool = False) -> None:
        data, width, height = encode_depth_payload(depth, scale=scale)
        self.store.set(
            key,
            image_document(data, mime_type="image/png", width=width, height=height, channels=1, depth_scale=scale),
        )
        self._finish(commit)

    def publish_intrinsics(self, key: str, intrinsic_matrix: Any, commit: bool = False) -> None:
        k = np.asarray(intrinsic_matrix, dtype=np.float64)
        if k.shape != (3, 3):
            raise ValueError(f"intrinsic_matrix must have shape (3, 3), got {k.shape}")
        self.store.set(key, k.tolist())
        self._finish(commit)

    def read_pose(self, key_pos: str, key_ori: str | None = None) -> tuple[np.ndarray, np.ndarray | None]:
        """Read back a published pose; raises DecodeError if the keys are empty or malformed."""
        fut_pos = self.store.get(key_pos)
        fut_ori = self.store.get(key_ori) if key_ori else None
        self.store.commit()
        pos_doc = fut_pos.result()
        if pos_doc is None:
            raise DecodeError(f"no position stored at {key_pos!r}")
        try:
            pos = as_vec3(pos_doc, name=key_pos)
            ori = None
            if fut_ori is not None:
                ori_doc = fut_ori.result()
                if ori_doc is None:
                    raise DecodeError(f"no orientation stored at {key_ori!r}")
                ori = as_quat(ori_doc, name=str(key_ori))
        except (TypeError, ValueError) as e:
            if isinstance(e, DecodeError):
                raise
            raise DecodeError(str(e)) from e
        return pos, ori
