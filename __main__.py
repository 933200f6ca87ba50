"""CLI entry point for hydroplan.

This module acts as the central entry point for the project's CLI tools.
Run it from the repository root as ``python . {command} [args]``.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from hydroplan.config import (
    EnvVar,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from hydroplan.core import get_logger, mask_secret, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Helpers
# =============================================================================


def _parse_plant(value: str) -> tuple[str, int]:
    """Parse a ``ID=QTY`` plant selection."""
    plant_id, sep, quantity = value.partition("=")
    if not sep or not plant_id.strip():
        raise argparse.ArgumentTypeError(f"expected ID=QTY, got '{value}'")
    try:
        count = int(quantity)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"quantity must be an integer, got '{quantity}'"
        ) from None
    if count < 0:
        raise argparse.ArgumentTypeError(f"quantity must be >= 0, got {count}")
    return plant_id.strip(), count


def _read_json(path: Path) -> dict:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _write_result(data: dict, output: Path | None) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Saved to {output}")
    else:
        print(text)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--model",
        "-m",
        type=str,
        default=None,
        help="LLM model name (default: $LLM_MODEL)",
    )
    parser.add_argument(
        "--api-key",
        "-k",
        action="append",
        dest="api_keys",
        default=None,
        help="API key to rotate through; repeatable (uses env vars if omitted)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Generation attempts per call (default: $GENERATION_MAX_ATTEMPTS)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )


def _run_generation(args: argparse.Namespace, operation) -> int:
    """Build a planner from CLI arguments and run one async operation."""
    from hydroplan.llm import GenerationFailedError
    from hydroplan.planner import create_planner

    planner = create_planner(
        args.model, api_keys=args.api_keys, max_attempts=args.retries
    )

    try:
        result = asyncio.run(operation(planner))
    except GenerationFailedError as e:
        logger.error(f"Generation failed after {e.attempts} attempt(s): {e}")
        return 1

    _write_result(result.to_json_dict(), args.output)
    stats = planner.last_stats
    logger.info(
        f"Stats: {stats.attempts} attempt(s), "
        f"keys used: {', '.join(stats.credentials) or 'none'}"
    )
    return 0


# =============================================================================
# Generate Commands
# =============================================================================


def cmd_layout(args: argparse.Namespace) -> int:
    """Handle the layout command."""
    from hydroplan.domain import DEFAULT_PLANT_CATALOG, LayoutRequest

    selected = dict(args.plants or [])
    request = LayoutRequest(
        space_size=args.space_size,
        selected_plants=selected,
        plant_data=list(DEFAULT_PLANT_CATALOG),
        setup_type=args.setup,
        max_height=args.max_height,
    )
    logger.info(
        f"Generating {request.setup_type} layout for {request.space_size:g}m² "
        f"with {sum(selected.values())} plant(s)"
    )
    return _run_generation(args, lambda planner: planner.generate_layout(request))


def cmd_environment(args: argparse.Namespace) -> int:
    """Handle the environment command."""
    from hydroplan.domain import LayoutAnalysis

    layout = LayoutAnalysis.model_validate(_read_json(args.layout))
    logger.info(f"Generating automation plan for {args.layout}")
    return _run_generation(
        args, lambda planner: planner.generate_virtual_environment(layout)
    )


def cmd_optimize(args: argparse.Namespace) -> int:
    """Handle the optimize command."""
    from hydroplan.domain import VirtualEnvironment

    environment = VirtualEnvironment.model_validate(_read_json(args.environment))
    logger.info(f"Optimizing schedule for {args.environment}")
    return _run_generation(
        args, lambda planner: planner.optimize_schedule(environment)
    )


def handle_layout_command(argv: list[str]) -> int:
    """Parse and run the layout command."""
    from hydroplan.schema import SetupType

    parser = argparse.ArgumentParser(
        prog="python . layout",
        description="Generate a hydroponic system layout",
    )
    parser.add_argument(
        "space_size",
        type=float,
        help="Available floor area in square meters",
    )
    parser.add_argument(
        "--plant",
        "-p",
        type=_parse_plant,
        action="append",
        dest="plants",
        metavar="ID=QTY",
        help="Plant selection from the catalog; repeatable (see 'plants')",
    )
    parser.add_argument(
        "--setup",
        "-s",
        type=str,
        default=SetupType.HORIZONTAL.value,
        choices=[t.value for t in SetupType],
        help="Setup type (default: horizontal)",
    )
    parser.add_argument(
        "--max-height",
        type=float,
        default=None,
        help="Maximum height in meters for vertical setups",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    if args.space_size <= 0:
        parser.error("space_size must be positive")
    return cmd_layout(args)


def handle_environment_command(argv: list[str]) -> int:
    """Parse and run the environment command."""
    parser = argparse.ArgumentParser(
        prog="python . environment",
        description="Generate an automation plan from a layout JSON file",
    )
    parser.add_argument("layout", type=Path, help="Layout JSON file")
    _add_common_arguments(parser)
    return cmd_environment(parser.parse_args(argv))


def handle_optimize_command(argv: list[str]) -> int:
    """Parse and run the optimize command."""
    parser = argparse.ArgumentParser(
        prog="python . optimize",
        description="Optimize the schedule of a virtual environment JSON file",
    )
    parser.add_argument("environment", type=Path, help="Environment JSON file")
    _add_common_arguments(parser)
    return cmd_optimize(parser.parse_args(argv))


# =============================================================================
# Info Commands
# =============================================================================


def cmd_list_models(_argv: list[str]) -> int:
    """Handle the models command."""
    from hydroplan.llm import LLMModel, LLMProviderType

    available = get_available_llm_providers()
    logger.info("Available LLM Models:")
    for provider in LLMProviderType:
        models = LLMModel.list_by_provider(provider)
        if models:
            tag = "" if provider.value in available else " (no API key)"
            logger.info(f"\n  {provider.value}{tag}:")
            for model in models:
                logger.info(f"    {model.spec.name}")
    return 0


def cmd_list_plants(_argv: list[str]) -> int:
    """Handle the plants command."""
    from hydroplan.domain import DEFAULT_PLANT_CATALOG

    logger.info("Plant catalog:")
    for plant in DEFAULT_PLANT_CATALOG:
        logger.info(
            f"  {plant.id:>2}  {plant.name:<12} {plant.growth_time} days, "
            f"{plant.space_required:g}m²"
        )
    return 0


def cmd_list_components(argv: list[str]) -> int:
    """Handle the components command."""
    from hydroplan.schema import (
        ComponentCategory,
        export_component_schema,
        get_component_meta,
        get_components_by_category,
    )

    parser = argparse.ArgumentParser(
        prog="python . components",
        description="List the layout matrix codes",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the code registry as JSON",
    )
    args = parser.parse_args(argv)

    if args.json:
        print(json.dumps(export_component_schema(), indent=2))
        return 0

    for category in ComponentCategory:
        logger.info(f"\n  {category.value}:")
        for code in get_components_by_category(category):
            meta = get_component_meta(code)
            logger.info(f"    {int(code):>2}  {code.name:<16} {meta.description}")
    return 0


def cmd_show_config(argv: list[str]) -> int:
    """Handle the config command."""
    parser = argparse.ArgumentParser(
        prog="python . config",
        description="Show resolved configuration",
    )
    parser.add_argument(
        "--category",
        "-c",
        type=str,
        default=None,
        choices=["llm", "credentials", "generation", "logging"],
        help="Only show one category",
    )
    args = parser.parse_args(argv)

    for var in list_environment_variables(args.category):
        info = get_environment_info(var)
        value = get_environment(var)
        if value is None:
            shown = "(not set)"
        elif var.name.endswith(("_API_KEY", "_API_KEYS")):
            secrets = value if isinstance(value, list) else [value]
            shown = ", ".join(mask_secret(s) for s in secrets)
        else:
            shown = str(value)
        logger.info(f"{info.name} [{info.category}] = {shown}")
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Generation ===")
    print("  layout       Generate a system layout")
    print("  environment  Generate an automation plan for a layout")
    print("  optimize     Optimize the schedule of an environment")
    print("\n=== Info ===")
    print("  models       List available LLM models")
    print("  plants       List the plant catalog")
    print("  components   List the layout matrix codes")
    print("  config       Show resolved configuration")
    print("\nExamples:")
    print("  python . layout 12 -p 1=4 -p 4=10 -o layout.json")
    print("  python . layout 6 -p 3=6 --setup vertical --max-height 2.5")
    print("  python . environment layout.json -o environment.json")
    print("  python . optimize environment.json -o environment.json")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "layout": handle_layout_command,
        "environment": handle_environment_command,
        "optimize": handle_optimize_command,
        "models": cmd_list_models,
        "plants": cmd_list_plants,
        "components": cmd_list_components,
        "config": cmd_show_config,
    }

    if command in commands:
        setup_logging(get_environment(EnvVar.LOG_LEVEL))
        try:
            return commands[command](rest_args)
        except (OSError, ValueError) as e:
            logger.error(str(e))
            return 1

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
