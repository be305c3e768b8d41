from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from backends.registry import BackendRegistry
from buildtask.build_log import RunLog
from buildtask.config_loader import apply_task_overrides, load_build_config, normalize_build_config
from buildtask.config_models import BuildConfig
from buildtask.manifest_store import write_manifest
from buildtask.protoc_task import ProtocTask
from buildtask.validation import find_precondition_failure

app = typer.Typer(add_completion=False)
console = Console()
load_dotenv()


def _load_config(
    config_path: Optional[str],
    protos: Optional[List[str]],
    output: Optional[str],
    protoc: Optional[str],
    proto_path: Optional[str],
    include_imports: Optional[bool],
    temp_dir: Optional[str],
    keep_workspace: Optional[bool],
) -> BuildConfig:
    if config_path:
        try:
            config = load_build_config(Path(config_path))
        except (FileNotFoundError, ValueError) as exc:
            raise typer.BadParameter(str(exc), param_hint="--config") from exc
    else:
        config = normalize_build_config({"task": {}})
    try:
        return apply_task_overrides(
            config,
            protos=protos,
            output=output,
            protoc_exe=protoc,
            proto_path=proto_path,
            include_imports=include_imports,
            temp_dir=temp_dir,
            keep_workspace=keep_workspace,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_task(build_config: BuildConfig, log: RunLog) -> ProtocTask:
    try:
        return ProtocTask.from_build_config(build_config, log)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0]) if exc.args else str(exc), param_hint="--config") from exc


@app.command("list")
def list_backends():
    """List available generator and compiler backends."""
    registry = BackendRegistry()
    console.print(f"Generators: {', '.join(registry.list_generators())}")
    console.print(f"Compilers: {', '.join(registry.list_compilers())}")
    profiles = sorted(path.name for path in Path("profiles/tasks").glob("*.yaml"))
    console.print(f"Task profiles: {', '.join(profiles)}" if profiles else "Task profiles: (none)")


@app.command()
def check(
    protos: Optional[List[str]] = typer.Argument(None, help="Input .proto files"),
    config: Optional[str] = typer.Option(None, help="Build config YAML path"),
    output: Optional[str] = typer.Option(None, help="Output directory override"),
    protoc: Optional[str] = typer.Option(None, help="protoc executable override"),
    proto_path: Optional[str] = typer.Option(None, help="Import search path override"),
    include_imports: Optional[bool] = typer.Option(None, "--include-imports/--no-include-imports"),
    temp_dir: Optional[str] = typer.Option(None, help="Workspace root override"),
):
    """Check preconditions and print the protoc command line without running anything."""
    build_config = _load_config(config, protos, output, protoc, proto_path, include_imports, temp_dir, None)
    failure = find_precondition_failure(build_config.task)
    if failure is not None:
        console.print(f"[bold red]Precondition failed ({failure.check}):[/bold red] {escape(failure.message)}")
        raise typer.Exit(code=1)

    task = _build_task(build_config, RunLog())
    console.print("Preconditions: ok")
    console.print(f"Workspace: {task.temp_dir()}")
    console.print(f"Descriptor: {task.descriptor_path()}")
    console.print(f"Command line: {task.command_line()}")


@app.command()
def run(
    protos: Optional[List[str]] = typer.Argument(None, help="Input .proto files"),
    config: Optional[str] = typer.Option(None, help="Build config YAML path"),
    output: Optional[str] = typer.Option(None, help="Output directory override"),
    protoc: Optional[str] = typer.Option(None, help="protoc executable override"),
    proto_path: Optional[str] = typer.Option(None, help="Import search path override"),
    include_imports: Optional[bool] = typer.Option(None, "--include-imports/--no-include-imports"),
    temp_dir: Optional[str] = typer.Option(None, help="Workspace root override"),
    keep_workspace: Optional[bool] = typer.Option(None, "--keep-workspace/--cleanup-workspace"),
    verbose: bool = typer.Option(
        False,
        "--verbose/--quiet",
        help="Quiet by default; use --verbose to print every diagnostic, not just errors.",
    ),
):
    """Run protoc, the code generator, and (if requested) the native compiler."""
    build_config = _load_config(
        config, protos, output, protoc, proto_path, include_imports, temp_dir, keep_workspace
    )
    log_path = Path(build_config.output.log_path) if build_config.output.log_path else None
    log = RunLog(log_path=log_path, console=console, verbose=verbose)
    task = _build_task(build_config, log)

    outcome = task.run()

    if build_config.output.manifest_path:
        manifest_file = Path(build_config.output.manifest_path)
        write_manifest(manifest_file, outcome.to_manifest())
        console.print(f"Manifest written to {manifest_file}")
    if log_path is not None:
        console.print(f"Run log written to {log_path}")

    status = "success" if outcome.success else "failed"
    summary = f"Task summary: workspace_id={outcome.workspace_id} status={status}"
    if outcome.failed_stage:
        summary += f" failed_stage={outcome.failed_stage}"
    console.print(summary)
    if not outcome.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
