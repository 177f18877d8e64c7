"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import io
import tempfile
from pathlib import Path
from urllib.parse import urlparse

import typer
from PIL import Image
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.image_processing import prepare_image
from adapters.report_exporter import export_result_pdf
from core.config import GEMINI_BASE_URL, OPENAI_BASE_URL, AppSettings, write_user_env_vars
from core.domain.models import AnalysisResult

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str) -> tuple[bool, str]:
    try:
        async with build_async_client() as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_image_pipeline(settings: AppSettings) -> tuple[bool, str]:
    """Encode a synthetic oversized photo to make sure Pillow's JPEG codec works."""

    try:
        buffer = io.BytesIO()
        Image.new("RGB", (2400, 1800), "white").save(buffer, format="PNG")
        prepared = prepare_image(
            buffer.getvalue(),
            max_dimension=settings.max_image_dimension,
            quality=settings.jpeg_quality,
        )
        return True, f"2400x1800 -> {prepared.width}x{prepared.height} JPEG"
    except Exception as exc:
        return False, str(exc)


def _check_pdf() -> tuple[bool, str]:
    """Attempt to generate a minimal PDF to detect WeasyPrint issues."""

    try:
        with tempfile.TemporaryDirectory() as tmp:
            export_result_pdf(result=AnalysisResult(), output_path=Path(tmp) / "_doctor_test.pdf")
        return True, "OK"
    except Exception as exc:
        return False, str(exc)


def tts_config_problem(settings: AppSettings) -> str | None:
    """Detecta combinaciones TTS que no pueden funcionar; None si parece usable."""

    tts_host = urlparse(settings.ai_tts_base_url).netloc
    if tts_host == urlparse(GEMINI_BASE_URL).netloc:
        return "Gemini's OpenAI-compatible endpoint has no audio/speech; set AUSHADH_AI_TTS_BASE_URL"
    same_provider = tts_host == urlparse(settings.ai_base_url).netloc
    if not same_provider and not settings.ai_tts_api_key:
        return f"No AUSHADH_AI_TTS_API_KEY for {tts_host}; the main AI key belongs to another provider"
    return None


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Aushadh-AI Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if bool(settings.ai_api_key):
        table.add_row("AI key", "OK", "Direct model calls enabled")
    elif settings.proxy_url:
        table.add_row("AI key", "OPTIONAL", f"No key set -> using proxy {settings.proxy_url}")
    else:
        table.add_row("AI key", "MISSING", "Set AUSHADH_AI_API_KEY or AUSHADH_PROXY_URL")
    table.add_row("AI base_url", "OK", settings.ai_base_url)
    table.add_row("AI model", "OK", settings.ai_model)
    table.add_row("Locator model", "OK", settings.ai_locator_model)
    table.add_row("TTS model", "OK", f"{settings.ai_tts_model} ({settings.ai_tts_voice})")
    tts_problem = tts_config_problem(settings)
    table.add_row("TTS endpoint", "WARN" if tts_problem else "OK", tts_problem or settings.ai_tts_base_url)

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings.ai_base_url))
    table.add_row("Provider connectivity", "OK" if ok_http else "FAIL", detail_http)

    if settings.proxy_url:
        ok_proxy, detail_proxy = asyncio.run(_check_http(settings.proxy_url))
        table.add_row("Proxy health", "OK" if ok_proxy else "FAIL", detail_proxy)

    ok_img, detail_img = _check_image_pipeline(settings)
    table.add_row("Pillow JPEG", "OK" if ok_img else "FAIL", detail_img)

    # PDF
    ok_pdf, detail_pdf = _check_pdf()
    table.add_row("WeasyPrint PDF", "OK" if ok_pdf else "FAIL", detail_pdf)

    _console.print(table)

    if not ok_pdf:
        _console.print(
            "\n[yellow]Note:[/yellow] When PDF export fails, `--export-pdf` automatically falls back to HTML."
        )


PROVIDER_PRESETS: dict[str, dict[str, str]] = {
    "gemini": {
        "AUSHADH_AI_BASE_URL": GEMINI_BASE_URL,
        "AUSHADH_AI_MODEL": "gemini-2.5-flash",
        "AUSHADH_AI_TTS_BASE_URL": OPENAI_BASE_URL,
        "AUSHADH_AI_TTS_MODEL": "gpt-4o-mini-tts",
    },
    "openai": {
        "AUSHADH_AI_BASE_URL": OPENAI_BASE_URL,
        "AUSHADH_AI_MODEL": "gpt-4o-mini",
        "AUSHADH_AI_TTS_BASE_URL": OPENAI_BASE_URL,
        "AUSHADH_AI_TTS_MODEL": "gpt-4o-mini-tts",
    },
    "openrouter": {
        "AUSHADH_AI_BASE_URL": "https://openrouter.ai/api/v1",
        "AUSHADH_AI_MODEL": "google/gemini-2.5-flash",
        "AUSHADH_AI_TTS_BASE_URL": OPENAI_BASE_URL,
        "AUSHADH_AI_TTS_MODEL": "gpt-4o-mini-tts",
    },
    "ollama": {
        "AUSHADH_AI_BASE_URL": "http://localhost:11434/v1",
        "AUSHADH_AI_MODEL": "llava",
        "AUSHADH_AI_TTS_BASE_URL": OPENAI_BASE_URL,
        "AUSHADH_AI_TTS_MODEL": "gpt-4o-mini-tts",
    },
}


@app.command(name="setup-ai")
def setup_ai() -> None:
    """Interactive AI setup (stores config in the user config .env)."""

    provider = typer.prompt(
        "AI provider",
        default="gemini",
        show_default=True,
    ).strip().lower()

    values = PROVIDER_PRESETS.get(provider, {}).copy()
    if not values:
        _console.print("[yellow]Unknown provider preset. You can still enter custom values.[/yellow]")

    base_url = typer.prompt("AI base URL", default=values.get("AUSHADH_AI_BASE_URL", ""), show_default=True).strip()
    model = typer.prompt("AI model", default=values.get("AUSHADH_AI_MODEL", ""), show_default=True).strip()
    api_key = typer.prompt("AI API key", hide_input=True, confirmation_prompt=False).strip()

    if not base_url or not model:
        raise typer.BadParameter("base_url and model are required")

    tts_base_url = typer.prompt(
        "TTS base URL",
        default=values.get("AUSHADH_AI_TTS_BASE_URL", OPENAI_BASE_URL),
        show_default=True,
    ).strip()
    tts_model = typer.prompt(
        "TTS model",
        default=values.get("AUSHADH_AI_TTS_MODEL", "gpt-4o-mini-tts"),
        show_default=True,
    ).strip()
    tts_api_key: str | None = None
    if urlparse(tts_base_url).netloc != urlparse(base_url).netloc:
        tts_api_key = typer.prompt(
            "TTS API key (blank to skip speech)",
            default="",
            show_default=False,
            hide_input=True,
        ).strip() or None

    env_path = write_user_env_vars(
        {
            "AUSHADH_AI_BASE_URL": base_url,
            "AUSHADH_AI_MODEL": model,
            "AUSHADH_AI_LOCATOR_MODEL": model,
            "AUSHADH_AI_API_KEY": api_key,
            "AUSHADH_AI_TTS_BASE_URL": tts_base_url,
            "AUSHADH_AI_TTS_MODEL": tts_model,
            "AUSHADH_AI_TTS_API_KEY": tts_api_key,
        }
    )

    _console.print(f"[green]Saved AI config to:[/green] {env_path}")
