"""Load generated modules by file location.

Generated files usually live in a directory that is not an importable
package (the default is ``.tasc/``), so the generated modules find each
other relative to their own ``__file__`` instead of through ``import``.
"""

from __future__ import annotations

import hashlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType


def load_sibling(origin: str, relative: str) -> ModuleType:
    """Import the module at *relative* to the directory of *origin*.

    Each file is executed once per process; later calls return the module
    registered in :data:`sys.modules`.

    Args:
        origin: ``__file__`` of the importing module.
        relative: POSIX-style path of the target file, e.g. ``"api_types.py"``
            or ``"../gen/api_operations.py"``.

    Raises:
        ImportError: If the file does not exist or cannot be loaded.
    """
    path = (Path(origin).parent / relative).resolve()
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    name = f"_tasc_generated_{path.stem}_{digest}"

    if name in sys.modules:
        return sys.modules[name]
    if not path.is_file():
        raise ImportError(f"Generated module not found: {path}")

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load generated module: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module
