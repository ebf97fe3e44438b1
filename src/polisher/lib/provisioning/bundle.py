"""Isolated loading contexts for provisioned artifacts."""

from __future__ import annotations

import hashlib
import importlib
import sys
import threading
import types
from pathlib import Path
from typing import Protocol

import structlog

from polisher.lib.errors import ProvisioningError

logger = structlog.get_logger(__name__)

_NAMESPACE_PREFIX = "_polisher_bundle_"


class ArtifactBundle(Protocol):
    """Loaded module handle for one provisioned artifact."""

    def load(self, qualified_name: str) -> object:
        """Return the module or attribute named `qualified_name`.

        Raises `ModuleNotFoundError` when nothing by that name exists in the
        bundle, and `AttributeError` when the module exists but the attribute
        path does not.
        """
        ...


class ModuleBundle:
    """Loads Python modules from one directory or zip archive.

    Modules are imported under a private top-level namespace derived from the
    bundle location, so two versions of the same artifact can be loaded side
    by side without shadowing each other or any installed package. Code inside
    the bundle must use relative imports to reach its own modules.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        digest = hashlib.sha1(str(root).encode("utf-8")).hexdigest()[:12]
        self._namespace = f"{_NAMESPACE_PREFIX}{digest}"
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def namespace(self) -> str:
        return self._namespace

    def _ensure_namespace(self) -> None:
        with self._lock:
            if self._namespace in sys.modules:
                return
            if not self._root.exists():
                raise ProvisioningError(f"Artifact location '{self._root}' does not exist.")
            package = types.ModuleType(self._namespace)
            package.__path__ = [str(self._root)]
            package.__package__ = self._namespace
            sys.modules[self._namespace] = package
            logger.debug("Registered artifact namespace.", namespace=self._namespace, root=str(self._root))

    def _is_missing(self, error: ModuleNotFoundError, module_name: str) -> bool:
        missing = error.name or ""
        return module_name == missing or module_name.startswith(f"{missing}.")

    def load(self, qualified_name: str) -> object:
        self._ensure_namespace()
        parts = qualified_name.split(".")
        for split in range(len(parts), 0, -1):
            module_name = f"{self._namespace}.{'.'.join(parts[:split])}"
            try:
                target: object = importlib.import_module(module_name)
            except ModuleNotFoundError as error:
                if not self._is_missing(error, module_name):
                    # The module exists but one of its own imports is missing.
                    raise
                continue
            for attribute in parts[split:]:
                target = getattr(target, attribute)
            return target
        raise ModuleNotFoundError(
            f"No module named {qualified_name!r} in artifact '{self._root}'.",
            name=qualified_name,
        )

    def __repr__(self) -> str:
        return f"ModuleBundle(root={str(self._root)!r})"
