"""CLI entry point for vajra.

Headless access to the backend registry, Ollama inventory, model
resolution and hardware advice. The chat/editor layer uses the same
internals through vajra.engine.

Entry point:
    vajra-cli backends [--json]
    vajra-cli models [--json]
    vajra-cli send "prompt" [--backend ID] [--model ID] [--retries N]
    vajra-cli recommend [--memory-gb N] [--accelerator | --no-accelerator] [--json]
    vajra-cli check-model NAME
    vajra-cli status
    vajra-cli setup
    vajra-cli set-key BACKEND KEY [--env-file PATH]
    vajra-cli migrate-defaults [--apply] [--env-file PATH]
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from vajra.config import DEFAULT_ENV_FILE, VajraConfig

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# ARGUMENT PARSING
# ─────────────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vajra-cli",
        description="Send prompts to interchangeable LLM backends.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--config", default=None, help="YAML settings file overlaying the environment"
    )
    sub = parser.add_subparsers(dest="command")

    backends_p = sub.add_parser("backends", help="List backends and whether they are configured")
    backends_p.add_argument("--json", action="store_true", dest="json_output")

    models_p = sub.add_parser("models", help="List installed and loaded Ollama models")
    models_p.add_argument("--json", action="store_true", dest="json_output")

    send_p = sub.add_parser("send", help="Send a prompt")
    send_p.add_argument("prompt", help="Prompt text")
    send_p.add_argument("--backend", default=None, help="Backend id (default from config)")
    send_p.add_argument("--model", default=None, help="Model id (default from config)")
    send_p.add_argument(
        "--retries", type=int, default=0,
        help="Retry attempts while the Ollama server is unreachable (default: none)",
    )

    rec_p = sub.add_parser("recommend", help="Recommend a model for this hardware")
    rec_p.add_argument("--memory-gb", type=float, default=None, help="RAM in GB (default: detect)")
    rec_p.add_argument(
        "--accelerator", action=argparse.BooleanOptionalAction, default=None,
        help="Whether a GPU is available (default: detect)",
    )
    rec_p.add_argument("--json", action="store_true", dest="json_output")

    check_p = sub.add_parser("check-model", help="Check whether an Ollama model is installed")
    check_p.add_argument("model", help="Model name, e.g. qwen2.5-coder:7b")

    sub.add_parser("status", help="Print a Markdown model status report")
    sub.add_parser("setup", help="Print setup commands for this hardware")

    key_p = sub.add_parser("set-key", help="Store an API key for a backend")
    key_p.add_argument("backend", help="Backend id, e.g. openai")
    key_p.add_argument("key", help="API key")
    key_p.add_argument("--env-file", default=DEFAULT_ENV_FILE)

    mig_p = sub.add_parser("migrate-defaults", help="Switch defaults to the best installed Ollama model")
    mig_p.add_argument("--apply", action="store_true", help="Persist the proposed defaults")
    mig_p.add_argument("--env-file", default=DEFAULT_ENV_FILE)

    return parser


def _print_failure(failure) -> None:
    print(f"{failure.kind.value}: {failure.message}", file=sys.stderr)
    if failure.remedy.target:
        print(f"Remedy ({failure.remedy.label}): {failure.remedy.target}", file=sys.stderr)
    elif failure.remedy.label:
        print(f"Remedy: {failure.remedy.label}", file=sys.stderr)


def _profile_from_args(memory_gb: Optional[float], accelerator: Optional[bool]):
    from vajra.advisor import HardwareProfile, detect_hardware

    detected = detect_hardware()
    return HardwareProfile(
        memory_gb=detected.memory_gb if memory_gb is None else memory_gb,
        has_accelerator=detected.has_accelerator if accelerator is None else accelerator,
    )


# ─────────────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────────────


async def _cmd_backends(config: VajraConfig, json_output: bool = False, probe=None) -> int:
    """List every backend in registration order. Returns exit code."""
    from vajra.adapters.ollama import OLLAMA_BACKEND_ID
    from vajra.probe import InventoryProbe
    from vajra.registry import build_registry

    registry = build_registry(config)
    probe = probe or InventoryProbe.from_config(config)

    rows = []
    for adapter in registry.list_all():
        row = {
            "id": adapter.backend_id,
            "name": adapter.display_name,
            "configured": adapter.is_configured(),
            "default": adapter.backend_id == config.default_backend,
        }
        if adapter.backend_id == OLLAMA_BACKEND_ID:
            row["installed_models"] = len(await probe.list_installed())
        rows.append(row)

    if json_output:
        json.dump(rows, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    for row in rows:
        status = "configured" if row["configured"] else "not configured"
        if "installed_models" in row:
            count = row["installed_models"]
            status += f" ({count} models)" if count else " (offline or no models)"
        marker = "*" if row["default"] else " "
        print(f"{marker} {row['id']:<12} {row['name']:<20} {status}")
    return 0


async def _cmd_models(config: VajraConfig, json_output: bool = False, probe=None) -> int:
    """List installed and resident Ollama models. Returns exit code."""
    from vajra.probe import InventoryProbe

    probe = probe or InventoryProbe.from_config(config)
    snapshot = await probe.snapshot()

    if json_output:
        result = {
            "endpoint": probe.endpoint,
            "installed": list(snapshot.installed_models),
            "resident": [
                {
                    "name": m.name,
                    "size": m.size,
                    "expires_at": m.expires_at.isoformat() if m.expires_at else None,
                }
                for m in snapshot.resident_models
            ],
        }
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    if snapshot.is_empty:
        print(f"No models found at {probe.endpoint} (server offline or nothing installed)", file=sys.stderr)
        return 1

    for name in snapshot.installed_models:
        suffix = " (loaded)" if snapshot.is_resident(name) else ""
        print(f"{name}{suffix}")
    return 0


async def _cmd_send(
    config: VajraConfig,
    prompt: str,
    backend_id: Optional[str] = None,
    model_id: Optional[str] = None,
    retries: int = 0,
    probe=None,
) -> int:
    """Send one prompt and print the completion. Returns exit code."""
    from vajra.engine import send_prompt, send_with_retry
    from vajra.errors import UnknownBackendError
    from vajra.registry import build_registry

    registry = build_registry(config)
    try:
        if retries > 0:
            outcome = await send_with_retry(
                registry, config, prompt, backend_id, model_id, probe, attempts=retries + 1
            )
        else:
            outcome = await send_prompt(registry, config, prompt, backend_id, model_id, probe)
    except UnknownBackendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if outcome.resolution is not None and outcome.resolution.notice:
        print(outcome.resolution.notice, file=sys.stderr)

    if not outcome.ok:
        _print_failure(outcome.failure)
        return 1

    print(outcome.text)
    return 0


def _cmd_recommend(
    memory_gb: Optional[float] = None,
    accelerator: Optional[bool] = None,
    json_output: bool = False,
) -> int:
    from vajra.advisor import alternatives, recommend

    profile = _profile_from_args(memory_gb, accelerator)
    primary = recommend(profile)
    others = alternatives(profile)

    if json_output:
        result = {
            "profile": profile.model_dump(),
            "recommended": primary.model_dump(),
            "alternatives": [r.model_dump() for r in others],
        }
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    print(f"Recommended: {primary.backend_id}/{primary.model_id} - {primary.rationale}")
    for alt in others:
        print(f"Alternative: {alt.backend_id}/{alt.model_id} - {alt.rationale}")
    return 0


async def _cmd_check_model(config: VajraConfig, model_id: str, probe=None) -> int:
    from vajra.probe import InventoryProbe
    from vajra.resolver import check_availability

    probe = probe or InventoryProbe.from_config(config)
    result = check_availability(model_id, await probe.snapshot())

    if result.available:
        print(f"{model_id} is installed and ready")
        return 0

    print(f"{model_id} not found. {result.suggestion}", file=sys.stderr)
    if result.pull_command:
        print(f"Run: {result.pull_command}", file=sys.stderr)
    return 1


async def _cmd_status(config: VajraConfig, probe=None) -> int:
    from vajra.advisor import detect_hardware
    from vajra.probe import InventoryProbe, ModelInventorySnapshot
    from vajra.report import build_status_report

    probe = probe or InventoryProbe.from_config(config)
    details, resident = await asyncio.gather(
        probe.list_installed_details(), probe.list_resident()
    )
    snapshot = ModelInventorySnapshot.of(
        (m.name for m in details), sorted(resident, key=lambda m: m.name)
    )
    print(build_status_report(snapshot, detect_hardware(), details), end="")
    return 0


def _cmd_setup() -> int:
    from vajra.advisor import detect_hardware, setup_commands

    commands = setup_commands(detect_hardware())
    print(commands.requirements)
    print()
    print("\n".join(commands.recommended))
    print()
    print("\n".join(commands.optional))
    return 0


def _cmd_set_key(config: VajraConfig, backend_id: str, key: str, env_file: str) -> int:
    from vajra.config import save_credential
    from vajra.registry import build_registry

    adapter = build_registry(config).get(backend_id)
    if adapter is None or not adapter.requires_credential:
        print(f"Error: '{backend_id}' does not take an API key", file=sys.stderr)
        return 1
    if not key.strip():
        print("Error: API key must not be empty", file=sys.stderr)
        return 1

    var = save_credential(backend_id, key.strip(), env_file)
    print(f"Stored {adapter.display_name} key as {var} in {env_file}")
    return 0


async def _cmd_migrate_defaults(
    config: VajraConfig,
    apply: bool = False,
    env_file: str = DEFAULT_ENV_FILE,
    probe=None,
) -> int:
    from vajra.config import save_defaults
    from vajra.migration import plan_default_migration
    from vajra.probe import InventoryProbe

    probe = probe or InventoryProbe.from_config(config)
    plan = plan_default_migration(config, await probe.snapshot())

    if plan is None:
        print("No Ollama models available; defaults unchanged", file=sys.stderr)
        return 1

    print(
        f"{plan.previous_backend_id}/{plan.previous_model_id} -> "
        f"{plan.backend_id}/{plan.model_id} ({plan.reason})"
    )
    if not plan.changes_anything:
        print("Defaults already up to date")
        return 0
    if not apply:
        print("Re-run with --apply to save these defaults")
        return 0

    save_defaults(plan.backend_id, plan.model_id, env_file)
    print(f"Saved defaults to {env_file}")
    return 0


# ─────────────────────────────────────────────────────────────────────
# ENTRY POINT
# ─────────────────────────────────────────────────────────────────────


def main():
    parser = _build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s %(message)s", stream=sys.stderr)

    # Load env
    from dotenv import load_dotenv
    load_dotenv()

    from vajra.config import load_config, load_config_file
    config = load_config()
    if args.config:
        config = load_config_file(args.config, base=config)

    # Dispatch
    if args.command == "backends":
        code = asyncio.run(_cmd_backends(config, json_output=args.json_output))
    elif args.command == "models":
        code = asyncio.run(_cmd_models(config, json_output=args.json_output))
    elif args.command == "send":
        code = asyncio.run(_cmd_send(
            config,
            prompt=args.prompt,
            backend_id=args.backend,
            model_id=args.model,
            retries=args.retries,
        ))
    elif args.command == "recommend":
        code = _cmd_recommend(
            memory_gb=args.memory_gb,
            accelerator=args.accelerator,
            json_output=args.json_output,
        )
    elif args.command == "check-model":
        code = asyncio.run(_cmd_check_model(config, args.model))
    elif args.command == "status":
        code = asyncio.run(_cmd_status(config))
    elif args.command == "setup":
        code = _cmd_setup()
    elif args.command == "set-key":
        code = _cmd_set_key(config, args.backend, args.key, args.env_file)
    elif args.command == "migrate-defaults":
        code = asyncio.run(_cmd_migrate_defaults(
            config, apply=args.apply, env_file=args.env_file
        ))
    else:
        parser.print_help()
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
