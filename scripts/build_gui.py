"""Bundle the swift-format editor GUI into a standalone executable with PyInstaller."""

from __future__ import annotations

import argparse
import os
import subprocess
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
APP_NAME = "swift-format-plugin-gui"


def run_pyinstaller(output_dir: Path, *, clean: bool = False, console: bool = False) -> None:
    build_dir = output_dir / "build"
    spec_dir = output_dir / "spec"
    build_dir.mkdir(parents=True, exist_ok=True)
    spec_dir.mkdir(parents=True, exist_ok=True)

    cmd = [
        "pyinstaller",
        "--name",
        APP_NAME,
        "--noconfirm",
        "--console" if console else "--windowed",
        "--paths",
        str(SRC_DIR),
        "--distpath",
        str(output_dir),
        "--workpath",
        str(build_dir),
        "--specpath",
        str(spec_dir),
        "--collect-submodules",
        "swift_format_plugin",
        str(SRC_DIR / "swift_format_plugin" / "gui" / "app.py"),
    ]
    if clean:
        cmd.insert(1, "--clean")
    subprocess.check_call(cmd, env=os.environ.copy(), cwd=PROJECT_ROOT)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--clean", action="store_true", help="Remove PyInstaller cache before building.")
    parser.add_argument(
        "--console",
        action="store_true",
        help="Keep a console window attached so swift-format diagnostics stay visible.",
    )
    parser.add_argument("--dist", type=Path, help="Output directory. Defaults to dist/.")
    args = parser.parse_args(argv)

    output_dir = (args.dist or PROJECT_ROOT / "dist").resolve()
    os.environ.setdefault("PYINSTALLER_CONFIG_DIR", str(output_dir / ".cache"))
    run_pyinstaller(output_dir, clean=args.clean, console=args.console)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
