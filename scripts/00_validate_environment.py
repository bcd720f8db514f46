import argparse
import platform
import sys

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import LOGS_DIR, TRACKED_PACKAGES
from src.interop.native import InteropError, load_library
from src.utils.logging import package_versions, write_json


def _library_available(name: str) -> bool:
    try:
        load_library(name)
    except InteropError:
        return False
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Record interpreter, platform and library versions.")
    parser.add_argument("--outdir", type=Path, default=None, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    logs_dir = (args.outdir / "logs") if args.outdir is not None else LOGS_DIR
    info = {
        "python_version": sys.version,
        "platform": platform.platform(),
        "packages": package_versions(TRACKED_PACKAGES),
        "libm_available": _library_available("m"),
        "libc_available": _library_available("c"),
    }
    missing = sorted(k for k, v in info["packages"].items() if v is None)
    info["missing_packages"] = missing
    write_json(logs_dir / "environment_check.json", info)
    print(f"Wrote {logs_dir / 'environment_check.json'}")
    if missing:
        print(f"Missing packages: {missing}")


if __name__ == "__main__":
    main()
