"""Generation of rust-project.json for rust-analyzer."""

from __future__ import annotations

import glob
import json
import os
import subprocess
from dataclasses import asdict, dataclass, field
from pathlib import Path


@dataclass
class Crate:
    """One exercise file presented as a crate."""

    root_module: str
    edition: str = "2021"
    deps: list[str] = field(default_factory=list)
    # Lets rust-analyzer work inside #[test] blocks.
    cfg: list[str] = field(default_factory=lambda: ["test"])


@dataclass
class RustAnalyzerProject:
    """The contents of rust-project.json."""

    sysroot_src: str = ""
    crates: list[Crate] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)

    def write_to_disk(self) -> None:
        """Write rust-project.json to the current directory."""
        Path("./rust-project.json").write_text(self.to_json(), encoding="utf-8")

    def _path_to_json(self, path: str) -> None:
        if Path(path).suffix == ".rs":
            self.crates.append(Crate(root_module=path))

    def exercises_to_json(self) -> None:
        """Add a crate for every .rs file below ./exercises."""
        for path in sorted(glob.glob("./exercises/**/*", recursive=True, include_hidden=True)):
            self._path_to_json(path)

    def get_sysroot_src(self) -> None:
        """Locate the standard library sources, from RUST_SRC_PATH or rustc."""
        env_path = os.environ.get("RUST_SRC_PATH")
        if env_path is not None:
            self.sysroot_src = env_path
            return
        result = subprocess.run(
            ["rustc", "--print", "sysroot"], capture_output=True, check=False
        )
        text = (result.stdout or b"").decode("utf-8", errors="replace")
        words = text.split()
        toolchain = words[0] if words else text
        print(f"Determined toolchain: {toolchain}\n")
        self.sysroot_src = str(Path(toolchain, "lib", "rustlib", "src", "rust", "library"))