"""Hands generated templates to Azure Resource Manager through the az CLI."""
import json
import logging
import subprocess
from datetime import datetime
from typing import Any, Dict, List

from .failures import classify_cli_error, classify_operation
from ..bicep.generator import BicepGenerator, resources_deployment_name
from ..errors import DeploymentError, ProvisioningError

logger = logging.getLogger(__name__)


def run_az(cmd: List[str]) -> subprocess.CompletedProcess:
    """Run an az CLI command, raising a classified error on failure.

    Raises:
        ProvisioningError: The classified failure reported by the CLI.
    """
    logger.debug("Running command: %s", " ".join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise DeploymentError(f"'{cmd[0]}' was not found on PATH; install the Azure CLI") from e
    except subprocess.CalledProcessError as e:
        logger.debug("Command failed with exit code %s: %s", e.returncode, e.stderr)
        raise classify_cli_error(e.stderr) from e


def default_subscription() -> str:
    """Subscription selected in the az CLI."""
    result = run_az(["az", "account", "show", "--query", "id", "-o", "tsv"])
    return result.stdout.strip()


class Deployer:
    """Applies the generated templates at subscription scope.

    Ordering, parallelism and retries are left to the engine; a failure is
    reported for the failing resource and nothing already created is rolled back.
    """

    def __init__(self, generator: BicepGenerator):
        self.generator = generator
        self.manifest = generator.manifest

    def _render_templates(self) -> None:
        # Generated files are derived from the manifest; stale ones would deploy an outdated graph
        self.generator.generate()
        logger.debug("Rendered templates for graph %s", self.generator.graph.fingerprint())

    def _command(self, action: str, deployment_name: str) -> List[str]:
        paths = self.generator.paths
        return [
            "az", "deployment", "sub", action,
            "--location", self.generator.stack.parameters.location,
            "--name", deployment_name,
            "--template-file", str(paths["main"]),
            "--parameters", f"@{paths['parameters']}",
        ]

    def what_if(self) -> List[Dict[str, Any]]:
        """Preview changes without touching any resource.

        Returns:
            List of change entries (resourceId, changeType).
        """
        self._render_templates()
        name = f"{self.manifest.deployment_name}-whatif-{datetime.now().strftime('%Y%m%d%H%M%S')}"
        cmd = self._command("what-if", name) + ["--no-pretty-print"]
        result = run_az(cmd)
        changes = json.loads(result.stdout or "{}").get("changes", [])
        logger.debug("What-if reported %d changes", len(changes))
        return changes

    def deploy(self) -> Dict[str, Any]:
        """Create or update every declared resource.

        Returns:
            Dict of deployment output values.

        Raises:
            ProvisioningError: Classified failure naming the failing resource when known.
        """
        self._render_templates()
        cmd = self._command("create", self.manifest.deployment_name) + ["-o", "json"]
        try:
            result = run_az(cmd)
        except ProvisioningError as e:
            failed = self.failed_operations()
            if failed:
                raise classify_operation(failed[0]) from e
            raise

        document = json.loads(result.stdout or "{}")
        outputs = document.get("properties", {}).get("outputs") or {}
        return {name: entry.get("value") for name, entry in outputs.items()}

    def failed_operations(self) -> List[Dict[str, Any]]:
        """Failed operations of the nested resource-group deployment, if they can be listed."""
        cmd = [
            "az", "deployment", "operation", "group", "list",
            "--resource-group", self.manifest.resource_group.name,
            "--name", resources_deployment_name(self.manifest),
            "--query", "[?properties.provisioningState=='Failed']",
            "-o", "json",
        ]
        try:
            result = run_az(cmd)
        except ProvisioningError as e:
            logger.debug("Could not list deployment operations: %s", e)
            return []
        return json.loads(result.stdout or "[]")

    def destroy(self) -> None:
        """Delete the resource group and everything in it."""
        run_az(["az", "group", "delete", "--name", self.manifest.resource_group.name, "--yes"])

