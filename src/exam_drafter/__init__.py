"""Top-level package for Exam Drafter.

Provides subpackages:
- exam_drafter.core – immutable models, schemas and the error taxonomy
- exam_drafter.document – canonical HTML derivation for exam documents
- exam_drafter.sync – editor surface <-> document synchronization
- exam_drafter.drafts – local draft persistence and auto-save
- exam_drafter.versions – multi-version (variant) management
- exam_drafter.session – reconciliation, generator/record adapters, session controller
- exam_drafter.export – PDF (raster) and DOCX (structural) exporters
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("exam-drafter")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
