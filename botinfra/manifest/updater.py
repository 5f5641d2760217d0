"""In-place edits of a YAML manifest."""
import yaml
from typing import Any, Dict


def _read(file_path: str) -> Dict[str, Any]:
    with open(file_path, 'r') as f:
        return yaml.safe_load(f) or {}


def _write(file_path: str, data: Dict[str, Any]) -> None:
    # Key order is kept so the manifest stays readable after an edit
    with open(file_path, 'w') as f:
        yaml.dump(data, f, sort_keys=False)


class ManifestUpdater:
    """Rewrites single values of a manifest file."""

    @staticmethod
    def update_location(file_path: str, location: str) -> None:
        """Point parameters.location at another region, adding the section if absent."""
        data = _read(file_path)
        data.setdefault('parameters', {})['location'] = location
        _write(file_path, data)

