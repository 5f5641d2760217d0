"""YAML manifest parser."""
import yaml
from pydantic import ValidationError

from .schema import Manifest
from ..errors import ManifestError


class ManifestParser:
    """Parser for YAML infrastructure manifests."""

    @staticmethod
    def load(file_path: str) -> Manifest:
        """Load and validate a YAML manifest file.

        Args:
            file_path: Path to the YAML manifest file.

        Returns:
            Manifest: Validated manifest object.

        Raises:
            FileNotFoundError: If the manifest file doesn't exist.
            ManifestError: If the YAML is malformed or the manifest is invalid.
        """
        with open(file_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ManifestError(f"Malformed YAML in {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"{file_path} does not contain a mapping")
        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest {file_path}: {e}") from e
