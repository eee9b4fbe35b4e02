"""stackscan CLI interface.

Commands:
- analyze: Analyze a project's dependency manifests
- categorize: Group dependencies with AI categorization
- check: Verify the completion service is reachable
- init: Write a default configuration file

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines for CI
- --version: Show version and exit
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer

from stackscan import __version__
from stackscan.config import (
    VALID_OUTPUT_FORMATS,
    StackscanConfig,
    create_default_config,
    load_config,
)
from stackscan.llm.client import CompletionClient, LLMError, create_client
from stackscan.models.analysis import TechStackSnapshot
from stackscan.renderers.filters import markdown_to_plain_text
from stackscan.renderers.formatter import (
    FOCUS_AREAS,
    FormatterOptions,
    OutputFormat,
    OutputFormatter,
)
from stackscan.templates.renderer import ECOSYSTEM_TITLES
from stackscan.utils.logging import configure_from_cli, get_logger

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_DETECTED = 2

NOT_DETECTED_MESSAGE = "No recognized dependency files found (package.json or requirements.txt)."

app = typer.Typer(
    name="stackscan",
    help="Dependency manifest analyzer and tech stack summarizer",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: StackscanConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"stackscan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log lines",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """stackscan - Tech stack analysis from dependency manifests.

    Reads package.json and requirements.txt, categorizes every dependency and
    summarizes the stack, optionally with AI-generated descriptions.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug("Loaded config from: %s", _config.config_path)
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(EXIT_ERROR)
    except Exception as e:
        _logger.error("Failed to load config: %s", e)
        raise typer.Exit(EXIT_ERROR)


def _get_config() -> StackscanConfig:
    return _config if _config is not None else StackscanConfig()


def _build_client(no_ai: bool = False) -> CompletionClient | None:
    """Create the completion client, or None when AI is off."""
    if no_ai:
        return None
    llm_config = _get_config().llm
    if not llm_config.enabled:
        _logger.debug("AI features disabled in configuration")
        return None
    return create_client(llm_config)


# =============================================================================
# analyze command
# =============================================================================


async def _render_categories(
    snapshot: TechStackSnapshot,
    fmt: OutputFormat,
    client: CompletionClient | None,
    show_versions: bool,
    focus: str | None,
    tech: str | None,
) -> str:
    """Render every ecosystem's category map through the output formatter."""
    formatter = OutputFormatter(client)
    rendered: list[str] = []

    for ecosystem, stack in snapshot.stacks():
        options = FormatterOptions(
            show_versions=show_versions,
            focus_area=focus,
            tech_focus=tech,
            dependencies=stack.dependencies,
        )
        body = await formatter.render_categories(stack.categories, fmt, options)
        if not body:
            continue
        if fmt is OutputFormat.INLINE:
            rendered.append(body)
        elif fmt is OutputFormat.MARKDOWN:
            rendered.append(f"# {ECOSYSTEM_TITLES[ecosystem]}\n\n{body}")
        else:
            rendered.append(f"{ECOSYSTEM_TITLES[ecosystem]}\n\n{body}")

    separator = ", " if fmt is OutputFormat.INLINE else "\n\n"
    return separator.join(rendered)


async def _run_analyze(
    path: Path,
    fmt: OutputFormat,
    client: CompletionClient | None,
    show_versions: bool,
    focus: str | None,
    tech: str | None,
) -> tuple[TechStackSnapshot, str]:
    from stackscan.analyzers.dependency import DependencyAnalyzer

    analyzer = DependencyAnalyzer(path, client, output_format=fmt.value)
    snapshot = await analyzer.analyze()

    if not snapshot.detected:
        return snapshot, ""

    if fmt is OutputFormat.JSON:
        return snapshot, json.dumps(snapshot.to_dict(), indent=2)

    if focus or tech or show_versions or fmt is OutputFormat.INLINE:
        output = await _render_categories(snapshot, fmt, client, show_versions, focus, tech)
        return snapshot, output

    summary = analyzer.generate_summary(snapshot)
    if fmt is OutputFormat.TEXT:
        return snapshot, markdown_to_plain_text(summary)
    return snapshot, summary.rstrip("\n")


@app.command()
def analyze(
    path: Annotated[
        Path,
        typer.Option(
            "--path",
            "-p",
            help="Project directory to analyze",
            exists=True,
            file_okay=False,
        ),
    ] = Path("."),
    format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format: markdown, text, inline, json (overrides config)",
        ),
    ] = None,
    show_versions: Annotated[
        bool,
        typer.Option(
            "--show-versions",
            help="Append major versions to technology names",
        ),
    ] = False,
    focus: Annotated[
        str | None,
        typer.Option(
            "--focus",
            help="Keep only frontend, backend or fullstack technologies (uses AI)",
        ),
    ] = None,
    tech: Annotated[
        str | None,
        typer.Option(
            "--tech",
            help="Keep only technologies related to one technology, e.g. react (uses AI)",
        ),
    ] = None,
    no_ai: Annotated[
        bool,
        typer.Option(
            "--no-ai",
            help="Skip AI descriptions and filtering",
        ),
    ] = False,
) -> None:
    """Analyze a project's dependency manifests.

    Exit codes:
        0: Analysis completed
        1: Error during analysis
        2: No package.json or requirements.txt found
    """
    config = _get_config()

    output_format = format or config.output.format
    if output_format not in VALID_OUTPUT_FORMATS:
        _logger.error(
            "Invalid format: %s. Valid: %s", output_format, ", ".join(sorted(VALID_OUTPUT_FORMATS))
        )
        raise typer.Exit(EXIT_ERROR)

    if focus is not None and focus not in FOCUS_AREAS:
        _logger.error("Invalid focus area: %s. Valid: %s", focus, ", ".join(sorted(FOCUS_AREAS)))
        raise typer.Exit(EXIT_ERROR)

    try:
        client = _build_client(no_ai)
    except ValueError as e:
        _logger.error("Invalid LLM configuration: %s", e)
        raise typer.Exit(EXIT_ERROR)

    project_path = path.resolve()
    _logger.info("Analyzing project: %s", project_path)

    try:
        snapshot, output = asyncio.run(
            _run_analyze(
                project_path,
                OutputFormat(output_format),
                client,
                show_versions or config.output.show_versions,
                focus,
                tech,
            )
        )
    except Exception as e:
        _logger.error("Analysis failed: %s", e)
        raise typer.Exit(EXIT_ERROR)

    if not snapshot.detected:
        typer.echo(NOT_DETECTED_MESSAGE)
        raise typer.Exit(EXIT_NOT_DETECTED)

    for warning in snapshot.warnings:
        _logger.warning("[%s] %s", warning.component, warning.message)

    typer.echo(output)


# =============================================================================
# categorize command
# =============================================================================


async def _run_categorize(path: Path, client: CompletionClient) -> dict[str, dict[str, list[str]]]:
    from stackscan.analyzers.dependency import PROCESSING_ORDER
    from stackscan.analyzers.manifest import detect_ecosystems, load_dependencies

    present = detect_ecosystems(path)
    result: dict[str, dict[str, list[str]]] = {}
    for ecosystem in PROCESSING_ORDER:
        if ecosystem not in present:
            continue
        dependencies = load_dependencies(path, ecosystem)
        result[ecosystem.value] = await client.categorize_dependencies(dependencies)
    return result


@app.command()
def categorize(
    path: Annotated[
        Path,
        typer.Option(
            "--path",
            "-p",
            help="Project directory to analyze",
            exists=True,
            file_okay=False,
        ),
    ] = Path("."),
) -> None:
    """Group dependencies into categories chosen by the AI model.

    Prints a JSON object of ecosystem -> category -> names.

    Exit codes:
        0: Categorization completed
        1: AI disabled, unreadable manifest or completion failure
        2: No package.json or requirements.txt found
    """
    from stackscan.analyzers.manifest import ManifestError, detect_ecosystems

    project_path = path.resolve()
    if not detect_ecosystems(project_path):
        typer.echo(NOT_DETECTED_MESSAGE)
        raise typer.Exit(EXIT_NOT_DETECTED)

    try:
        client = _build_client()
    except ValueError as e:
        _logger.error("Invalid LLM configuration: %s", e)
        raise typer.Exit(EXIT_ERROR)
    if client is None:
        _logger.error("AI categorization requires an enabled LLM configuration")
        raise typer.Exit(EXIT_ERROR)

    try:
        result = asyncio.run(_run_categorize(project_path, client))
    except (ManifestError, LLMError) as e:
        _logger.error("Categorization failed: %s", e)
        raise typer.Exit(EXIT_ERROR)

    typer.echo(json.dumps(result, indent=2))


# =============================================================================
# check command
# =============================================================================


@app.command()
def check() -> None:
    """Verify the configured completion service answers.

    Exit codes:
        0: Provider reachable
        1: AI disabled or provider unreachable
    """
    try:
        client = _build_client()
    except ValueError as e:
        _logger.error("Invalid LLM configuration: %s", e)
        raise typer.Exit(EXIT_ERROR)
    if client is None:
        typer.echo("❌ AI features are disabled (set OPENAI_API_KEY or configure llm)")
        raise typer.Exit(EXIT_ERROR)

    model = client.config.get_litellm_model_name()
    if asyncio.run(client.check_available()):
        typer.echo(f"✅ {model} is reachable")
        raise typer.Exit(EXIT_OK)

    typer.echo(f"❌ {model} did not answer")
    raise typer.Exit(EXIT_ERROR)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Write a default configuration to ./.stackscan/config.yaml."""
    config_dir = Path(".stackscan")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error("Config already exists: %s", config_file)
        _logger.info("Use --force to overwrite")
        raise typer.Exit(EXIT_ERROR)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config())
    _logger.info("Created config: %s", config_file)

    typer.echo(f"✅ stackscan configuration initialized: {config_file}")


if __name__ == "__main__":
    app()
