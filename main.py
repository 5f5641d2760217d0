"""Chat-bot stack provisioner CLI entrypoint."""
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from botinfra.bicep.generator import BicepGenerator
from botinfra.deploy.deployer import Deployer, default_subscription
from botinfra.deploy.verifier import BindingVerifier
from botinfra.errors import ParameterValidationError, ProvisioningError
from botinfra.graph.bindings import app_settings
from botinfra.quota.checker import QuotaChecker
from botinfra.resolve.live import LiveResolver
from botinfra.resolve.local import LocalResolver, evaluate
from botinfra.resolve.operations import DEFERRED

app = typer.Typer(help="Provision the chat-bot resource stack from a YAML manifest")
console = Console()

CONFIG_OPTION = typer.Option("infra.yaml", "--config", "-c", help="Path to the infrastructure YAML file")
DEBUG_OPTION = typer.Option(False, "--debug", help="Print verbose debug information including all Azure CLI commands")


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # Azure SDK HTTP logging is noisy even at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)


def fail(error: Exception) -> None:
    """Print a failure and exit; validation failures exit with 2."""
    console.print(f"[bold red]Error: {error}[/]")
    code = 2 if isinstance(error, ParameterValidationError) else 1
    raise typer.Exit(code)


@app.command("plan")
def plan(config: str = CONFIG_OPTION, debug: bool = DEBUG_OPTION):
    """Show the resource graph and the settings injected into the web app."""
    configure_logging(debug)
    try:
        generator = BicepGenerator(config)
    except ProvisioningError as e:
        fail(e)

    graph = generator.graph
    params = generator.stack.parameters
    console.print(
        f"[bold blue]Revision {params.revision.number}[/] location=[cyan]{params.location}[/] "
        f"appServiceSku=[cyan]{params.app_service_sku}[/] tier=[cyan]{params.app_service_tier}[/]"
    )

    table = Table(title="Resources (apply order)")
    table.add_column("#", justify="right")
    table.add_column("Symbol", style="cyan")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Waits for")
    for index, symbol in enumerate(graph.topological_order(), 1):
        resource = graph.get(symbol)
        name = resource.name if isinstance(resource.name, str) else "(computed)"
        table.add_row(str(index), symbol, resource.type, name, ", ".join(sorted(resource.edges())))
    console.print(table)

    settings, _ = app_settings(generator.stack)
    resolver = LocalResolver()
    settings_table = Table(title="Web app settings")
    settings_table.add_column("Setting", style="cyan")
    settings_table.add_column("Value at plan time")
    for name, value in settings:
        resolved = evaluate(value, graph, resolver)
        shown = "[dim]resolved during apply[/]" if resolved is DEFERRED else str(resolved)
        settings_table.add_row(name, shown)
    console.print(settings_table)
    console.print(f"Fingerprint: [bold]{graph.fingerprint()}[/]")


@app.command("generate")
def generate(
    config: str = CONFIG_OPTION,
    output_dir: str = typer.Option(None, "--output-dir", "-o", help="Directory for generated Bicep files"),
    debug: bool = DEBUG_OPTION,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing Bicep files")
):
    """Generate Bicep templates and parameters file from the YAML manifest."""
    configure_logging(debug)
    console.print("[bold blue]Generating Bicep files...[/]")

    try:
        generator = BicepGenerator(config, output_dir)
        existing_files = generator.existing_files()
        if existing_files and not force:
            existing_files_str = ", ".join(str(f) for f in existing_files)
            console.print(f"[bold yellow]WARNING: Bicep files already exist: {existing_files_str}[/]")
            console.print("[yellow]Use --force to overwrite existing files.[/]")
            raise typer.Exit(1)

        bicep_path, params_path = generator.generate()
    except ProvisioningError as e:
        fail(e)

    console.print(f"[green]Bicep template generated at {bicep_path}[/]")
    console.print(f"[green]Parameters file generated at {params_path}[/]")

    if debug:
        console.print("\n[bold blue]Generated resources template:[/]")
        console.print(generator.paths["resources"].read_text(), markup=False)


@app.command("deploy")
def deploy(
    config: str = CONFIG_OPTION,
    what_if: bool = typer.Option(False, "--what-if", help="Show what would be deployed without making changes"),
    debug: bool = DEBUG_OPTION
):
    """Regenerate the Bicep files from the manifest and deploy the stack."""
    configure_logging(debug)
    console.print("[bold blue]Deploying resources...[/]")

    try:
        deployer = Deployer(BicepGenerator(config))
        if what_if:
            changes = deployer.what_if()
            table = Table(title="What-if changes")
            table.add_column("Change", style="cyan")
            table.add_column("Resource")
            for change in changes:
                table.add_row(change.get("changeType", ""), change.get("resourceId", ""))
            console.print(table)
            console.print("\n[green]What-if analysis completed. No resources were modified.[/]")
            return

        outputs = deployer.deploy()
    except ProvisioningError as e:
        if e.resource:
            console.print(f"[red]Failing resource: {e.resource}[/]")
        console.print("[yellow]Resources created before the failure were left in place.[/]")
        fail(e)

    console.print("\n[green]Deployment completed successfully![/]")
    for name, value in outputs.items():
        console.print(f"  {name}: [cyan]{value}[/]")


@app.command("destroy")
def destroy(
    config: str = CONFIG_OPTION,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    debug: bool = DEBUG_OPTION
):
    """Delete the resource group and every resource in it."""
    configure_logging(debug)
    console.print("[bold red]WARNING: This will delete all resources in the resource group![/]")

    try:
        deployer = Deployer(BicepGenerator(config))
        rg_name = deployer.manifest.resource_group.name
        if not force and not typer.confirm(f"Are you sure you want to delete resource group '{rg_name}'?"):
            console.print("Deletion cancelled")
            return
        console.print(f"[yellow]Deleting resource group {rg_name}...[/]")
        deployer.destroy()
    except ProvisioningError as e:
        fail(e)

    console.print(f"[green]Resource group {rg_name} deleted successfully[/]")


@app.command("verify")
def verify(config: str = CONFIG_OPTION, debug: bool = DEBUG_OPTION):
    """Check the deployed web app settings against their source resources."""
    configure_logging(debug)

    try:
        generator = BicepGenerator(config)
        manifest = generator.manifest
        resolver = LiveResolver(manifest.subscription or default_subscription(), manifest.resource_group.name)
        results = BindingVerifier(generator.stack, generator.graph, resolver).verify()
    except ProvisioningError as e:
        fail(e)

    table = Table(title="Binding verification")
    table.add_column("Setting", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")
    for result in results:
        table.add_row(result.name, "[green]OK[/]" if result.ok else "[red]MISMATCH[/]", result.detail)
    console.print(table)

    if not all(r.ok for r in results):
        raise typer.Exit(1)


@app.command("quota-check")
def quota_check(
    config: str = CONFIG_OPTION,
    regions: Optional[List[str]] = typer.Option(None, "--region", "-r", help="Region to check (repeatable)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Don't update the manifest with the selected region"),
    output: str = typer.Option("region-analysis.json", "--output", "-o", help="Path for quota analysis output"),
    auto_select: bool = typer.Option(False, "--auto-select", help="Write a viable region to parameters.location"),
    debug: bool = DEBUG_OPTION
):
    """Check model-deployment capacity in candidate regions."""
    configure_logging(debug)
    console.print("[bold blue]Checking model capacity quotas...[/]")

    try:
        checker = QuotaChecker(config, dry_run=dry_run)
        analysis = checker.check_quotas(regions)
    except ProvisioningError as e:
        fail(e)

    analysis.save(output)
    console.print(f"[green]Quota analysis saved to {output}[/]")

    table = Table(title="Regions Quota Analysis")
    table.add_column("Region", style="cyan")
    table.add_column("Status")
    table.add_column("Required/Available")
    for name, region in sorted(analysis.regions.items()):
        if region.error:
            status = "❌ LOOKUP FAILED"
            details = f"[red]{region.error}[/]"
        else:
            details = "\n".join(
                f"{q.usage_name}: [{'green' if q.is_sufficient else 'red'}]{q.required:g}/{q.available:g}[/]"
                for q in region.quotas.values()
            )
            shortfalls = region.shortfalls()
            status = f"❌ SHORT ON {len(shortfalls)} COUNTER(S)" if shortfalls else "✓ VIABLE"
        table.add_row(name, status, details)
    console.print(table)

    if not analysis.viable_regions:
        console.print("[bold red]NO VIABLE REGIONS FOUND![/]")
        console.print("[link]https://aka.ms/oai/quotaincrease[/link]")
        raise typer.Exit(2)

    if auto_select:
        selected = checker.select_region(analysis)
        checker.update_manifest_location(selected)
        console.print(f"\n[green]Selected region: {selected}[/]")


if __name__ == "__main__":
    app()
