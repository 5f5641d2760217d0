"""Bicep template generator."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from jinja2 import Environment, FileSystemLoader

from .render import BicepRenderer, quote
from ..graph.builder import GraphBuilder
from ..graph.models import ResourceGraph
from ..manifest.parser import ManifestParser
from ..manifest.schema import Manifest

logger = logging.getLogger(__name__)

MAIN_FILE = "main.bicep"
RESOURCES_FILE = "resources.bicep"
PARAMETERS_FILE = "main.parameters.json"
PARAMETERS_SCHEMA = "https://schema.management.azure.com/schemas/2019-04-01/deploymentParameters.json#"


class BicepGenerator:
    """Generates Bicep templates from a YAML manifest."""

    def __init__(self, manifest_path: str, output_dir: Optional[str] = None):
        """Initialize the generator.

        Args:
            manifest_path: Path to the YAML manifest file.
            output_dir: Directory for generated Bicep files; defaults to the manifest's directory.

        Raises:
            ManifestError: If the manifest is invalid.
            ParameterValidationError: If a parameter is outside its allowed set.
        """
        self.manifest_path = manifest_path
        self.manifest: Manifest = ManifestParser.load(manifest_path)
        self.output_dir = Path(output_dir) if output_dir else Path(manifest_path).parent
        self.stack = self.manifest.to_stack_config()
        self.graph: ResourceGraph = GraphBuilder(self.stack).build()
        self.renderer = BicepRenderer(self.graph)

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    @property
    def paths(self) -> Dict[str, Path]:
        return {
            "main": self.output_dir / MAIN_FILE,
            "resources": self.output_dir / RESOURCES_FILE,
            "parameters": self.output_dir / PARAMETERS_FILE,
        }

    def existing_files(self) -> List[Path]:
        return [path for path in self.paths.values() if path.exists()]

    def generate(self) -> Tuple[str, str]:
        """Generate Bicep templates and parameters file.

        Returns:
            Tuple[str, str]: Paths to the main Bicep file and the parameters file.
        """
        logger.debug("Generating Bicep files from %s into %s", self.manifest_path, self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        paths = self.paths
        paths["main"].write_text(self.render_main())
        paths["resources"].write_text(self.render_resources())
        paths["parameters"].write_text(self.render_parameters())

        for path in paths.values():
            logger.debug("Wrote %s", path)
        return str(paths["main"]), str(paths["parameters"])

    def _parameter_context(self) -> List[Dict]:
        return [
            {
                "name": p.name,
                "type": p.type,
                "default": quote(p.default) if isinstance(p.default, str) else self.renderer.value(p.default),
                "allowed": [quote(v) for v in p.allowed_values] if p.allowed_values else None,
                "description": p.description,
            }
            for p in self.graph.parameters
        ]

    def render_main(self) -> str:
        """Render the subscription-scope template that creates the resource group."""
        template = self.jinja_env.get_template("main.bicep.j2")
        return template.render(
            manifest_name=self.manifest.metadata.name,
            resource_group=self.manifest.resource_group.name,
            deployment_name=resources_deployment_name(self.manifest),
            parameters=self._parameter_context(),
            tags=self.renderer.value(self.manifest.tags),
            outputs=list(self.graph.outputs),
        )

    def render_resources(self) -> str:
        """Render the resource-group-scope template holding every declaration."""
        order = self.graph.topological_order()
        resources = sorted(self.graph.resources, key=lambda r: order.index(r.symbol))
        template = self.jinja_env.get_template("resources.bicep.j2")
        return template.render(
            manifest_name=self.manifest.metadata.name,
            parameters=self._parameter_context(),
            variables=[(name, self.renderer.expression(v)) for name, v in self.graph.variables.items()],
            resources=[self.renderer.resource(r) for r in resources],
            outputs=[(name, self.renderer.expression(v)) for name, v in self.graph.outputs.items()],
        )

    def render_parameters(self) -> str:
        """Render the parameters file with the manifest's resolved values."""
        parameters = {"resourceGroupName": {"value": self.manifest.resource_group.name}}
        for p in self.graph.parameters:
            parameters[p.name] = {"value": p.default}
        parameters["tags"] = {"value": self.manifest.tags}
        document = {
            "$schema": PARAMETERS_SCHEMA,
            "contentVersion": "1.0.0.0",
            "parameters": parameters,
        }
        return json.dumps(document, indent=2) + "\n"


def resources_deployment_name(manifest: Manifest) -> str:
    """Name of the nested resource-group deployment created by main.bicep."""
    return f"{manifest.deployment_name}-resources"
