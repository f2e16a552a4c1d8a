from pathlib import Path

import toml

PROJECT_NAME = "irt-analysis"


class ProjectRootNotFound(Exception):
    pass


def get_project_root_dir() -> Path:
    """Look for the pyproject.toml that declares this project."""
    current = Path(__file__).parent

    # Walk up until we hit the root
    while True:
        candidate = current / "pyproject.toml"
        if candidate.exists():
            data = toml.load(candidate)
            if data.get("project", {}).get("name") == PROJECT_NAME:
                return current

        # Check if we've reached the root
        parent = current.parent
        if parent == current:
            raise ProjectRootNotFound

        current = parent
