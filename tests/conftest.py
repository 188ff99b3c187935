from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "global-home"
os.environ.setdefault("MBOX_HOME", str(SANDBOX_HOME))
os.environ.pop("SUDO_USER", None)
os.environ.pop("MBOX_ROLES", None)
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
PYTEST_TEMP = Path(os.environ.get("PYTEST_DEBUG_TEMPROOT", "/tmp/mbox-pytest")).resolve()
os.environ.setdefault("PYTEST_DEBUG_TEMPROOT", str(PYTEST_TEMP))
PYTEST_TEMP.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

PluginFactory = Callable[..., Path]


@pytest.fixture()
def make_plugin(tmp_path: Path) -> PluginFactory:
    """Write ``<base>/<name>/manifest.yaml`` plus any launcher scripts."""

    def factory(
        name: str,
        *,
        base: Optional[Path] = None,
        launcher: Optional[List[Dict[str, Any]]] = None,
        scripts: Optional[Dict[str, str]] = None,
        **fields: Any,
    ) -> Path:
        root = (base or tmp_path / "plugins") / name
        root.mkdir(parents=True, exist_ok=True)
        manifest: Dict[str, Any] = {"name": name, "version": "1.0.0", **fields}
        if launcher is not None:
            manifest["launcher"] = launcher
        (root / "manifest.yaml").write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")
        for relative, body in (scripts or {}).items():
            script = root / relative
            script.parent.mkdir(parents=True, exist_ok=True)
            script.write_text(body, encoding="utf-8")
            script.chmod(0o755)
        return root

    return factory
