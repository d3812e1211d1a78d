"""
Markdown status report for the self-hosted backend.

Pure rendering over a snapshot, the installed-model details and a hardware
profile. Turning the Markdown into anything else is the caller's job.
"""

from typing import Optional

from vajra.advisor import MODEL_BENCHMARKS, HardwareProfile, recommend
from vajra.probe import InstalledModel, ModelInventorySnapshot
from vajra.resolver import OLLAMA_INSTALL_URL, RECOMMENDED_MODEL

UPGRADE_MBPP_THRESHOLD = 80.0


def format_bytes(size: int) -> str:
    """Format a byte count as a human readable string."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def _unavailable_report() -> str:
    return f"""# Vajra Model Status Report

**Ollama Not Available**

Ollama is not running or has no models installed. To get started:

1. **Install Ollama**: {OLLAMA_INSTALL_URL}
2. **Pull a coding model**: `ollama pull {RECOMMENDED_MODEL}`
3. **Test it**: `ollama run {RECOMMENDED_MODEL} "Hello world in Python"`
"""


def build_status_report(
    snapshot: ModelInventorySnapshot,
    profile: HardwareProfile,
    installed_details: Optional[list[InstalledModel]] = None,
) -> str:
    """Render the Markdown status report."""
    if snapshot.is_empty:
        return _unavailable_report()

    rec = recommend(profile)
    sizes = {m.name: m.size for m in (installed_details or [])}

    lines = [
        "# Vajra Model Status Report",
        "",
        "## System Information",
        f"- Estimated RAM: {profile.memory_gb:g}GB",
        f"- GPU Detected: {'Yes' if profile.has_accelerator else 'No'}",
        f"- Recommended Model: {rec.model_id}",
        f"- Notes: {rec.rationale}",
        "",
        f"## Installed Models ({len(snapshot.installed_models)})",
    ]
    for name in snapshot.installed_models:
        entry = f"- **{name}**"
        if name in sizes:
            entry += f" ({format_bytes(sizes[name])})"
        bench = MODEL_BENCHMARKS.get(name)
        if bench:
            entry += f" - HumanEval: {bench.humaneval}% | MBPP: {bench.mbpp}%"
        lines.append(entry)

    lines += ["", f"## Currently Loaded ({len(snapshot.resident_models)})"]
    if not snapshot.resident_models:
        lines.append("No models currently in memory.")
    for model in snapshot.resident_models:
        expires = model.expires_at.strftime("%H:%M:%S") if model.expires_at else "Never"
        lines.append(f"- **{model.name}** ({format_bytes(model.size)}) - Expires: {expires}")

    lines += [
        "",
        "## Performance Benchmarks",
        "| Model | HumanEval | MBPP | Size | Speed | Memory |",
        "|-------|-----------|------|------|-------|--------|",
    ]
    for name, bench in MODEL_BENCHMARKS.items():
        marker = "[x]" if snapshot.is_installed(name) else "[ ]"
        lines.append(
            f"| {marker} {name} | {bench.humaneval}% | {bench.mbpp}% | "
            f"{bench.size} | {bench.speed} | {bench.memory} |"
        )

    lines += [
        "",
        "## Quick Commands",
        "```bash",
        f"ollama pull {rec.model_id}",
        "ollama list",
        "ollama ps",
        f"ollama stop {rec.model_id}",
        "```",
        "",
        "## Upgrade Recommendations",
    ]
    needs_upgrade = [
        name for name in snapshot.installed_models
        if name not in MODEL_BENCHMARKS
        or MODEL_BENCHMARKS[name].mbpp < UPGRADE_MBPP_THRESHOLD
    ]
    if needs_upgrade:
        lines.append("Consider upgrading these models for better performance:")
        for name in needs_upgrade:
            lines.append(f"- Replace **{name}** with **{RECOMMENDED_MODEL}**")
    else:
        lines.append("Your models are up to date.")

    return "\n".join(lines) + "\n"
