"""CLI principal de Aushadh-AI (Typer + Rich).

Comandos:
- analyze: foto de receta -> genéricos Jan Aushadhi + ahorro + resumen.
- locate:  coordenadas -> Jan Aushadhi Kendra más cercano.
- speak:   resumen (JSON exportado) -> WAV en el idioma elegido.
- serve:   proxy HTTP que guarda la API key.
- doctor:  diagnóstico del entorno.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from adapters.ai_analyst import ModelAnalyzer, build_ai_client
from adapters.http_client import fetch_bytes
from adapters.image_processing import normalize_rotation
from adapters.json_exporter import export_result_json, load_result_json
from adapters.proxy_client import ProxyAnalyzer
from adapters.report_exporter import export_result_html, export_result_pdf
from adapters.speech import generate_speech, pcm_duration_seconds, pcm_to_wav, select_summary_text
from adapters.store_locator import find_nearest_store
from cli import doctor
from cli.ui_components import (
    build_disclaimer,
    build_error_panel,
    build_medications_table,
    build_metadata_panel,
    build_no_medicines_panel,
    build_savings_panel,
    build_store_panel,
    build_summary_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import AushadhError, ConfigurationError
from core.domain.language import SummaryLanguage
from core.domain.models import AnalysisResult, AppStatus, StoreLocation
from core.interfaces.analyzer import PrescriptionAnalyzer
from core.services.prescription_pipeline import PrescriptionSession, SessionHooks
from core.services.savings import compute_savings

app = typer.Typer(
    no_args_is_help=True,
    help="Aushadh-AI: read a prescription photo and find Jan Aushadhi generic equivalents.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

_STATUS_LABELS: dict[AppStatus, str] = {
    AppStatus.UPLOADING: "Loading image...",
    AppStatus.PROCESSING: "Analyzing prescription...",
}

NO_STORE_MESSAGE = (
    "Unable to find a store nearby using the available data. Please try again or search on Google Maps."
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _validate_coordinates(lat: float | None, lng: float | None) -> tuple[float, float] | None:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise typer.BadParameter("--lat and --lng must be given together")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise typer.BadParameter("coordinates out of range")
    return lat, lng


def _build_analyzer(settings: AppSettings, proxy_url: str | None) -> PrescriptionAnalyzer:
    if proxy_url or settings.proxy_url:
        return ProxyAnalyzer(proxy_url, settings=settings)
    # Sin key no hay análisis posible: fallar antes de leer la imagen.
    return ModelAnalyzer(settings, client=build_ai_client(settings))


def render_result(
    console: Console,
    result: AnalysisResult,
    language: SummaryLanguage,
    store: StoreLocation | None = None,
) -> None:
    """Imprime el resultado completo (equivalente a la vista de resultados)."""

    savings = compute_savings(result.medications)
    if savings:
        console.print(build_savings_panel(savings))

    if not result.has_medications:
        console.print(build_no_medicines_panel())
    else:
        console.print(build_metadata_panel(result))
        console.print(build_medications_table(result))
        console.print(build_summary_panel(result, language))

    if store:
        console.print(build_store_panel(store))
    console.print(build_disclaimer(result))


def _export(
    result: AnalysisResult,
    *,
    language: SummaryLanguage,
    store: StoreLocation | None,
    export_json: Path | None,
    export_html: Path | None,
    export_pdf: Path | None,
) -> None:
    if export_json:
        path = export_result_json(result=result, output_path=export_json)
        _console.print(f"[green]JSON saved:[/green] {path}")
    if export_html:
        path = export_result_html(result=result, output_path=export_html, language=language, store=store)
        _console.print(f"[green]HTML saved:[/green] {path}")
    if export_pdf:
        try:
            path = export_result_pdf(result=result, output_path=export_pdf, language=language, store=store)
            _console.print(f"[green]PDF saved:[/green] {path}")
        except Exception as exc:
            fallback = export_pdf.with_suffix(".html")
            logging.getLogger(__name__).warning("PDF export failed (%s); writing HTML instead", exc)
            path = export_result_html(result=result, output_path=fallback, language=language, store=store)
            _console.print(f"[yellow]PDF export unavailable, HTML saved instead:[/yellow] {path}")


async def _run_analysis(
    *,
    settings: AppSettings,
    image: Path | None,
    sample: bool,
    rotation: int,
    analyzer: PrescriptionAnalyzer,
    coordinates: tuple[float, float] | None,
) -> tuple[PrescriptionSession, StoreLocation | None]:
    status_ctx = _console.status("Starting...")

    def on_status(status: AppStatus) -> None:
        label = _STATUS_LABELS.get(status)
        if label:
            status_ctx.update(label)

    session = PrescriptionSession(settings=settings, hooks=SessionHooks(status_changed=on_status))
    store: StoreLocation | None = None
    with status_ctx:
        if sample:
            await session.load_sample(lambda: fetch_bytes(settings.sample_image_url, settings=settings))
        elif image is not None:
            session.select_file(image.read_bytes(), image.name)

        if not session.has_image:
            return session, None

        session.rotation = rotation
        await session.process(analyzer)

        if session.status == AppStatus.SUCCESS and coordinates:
            status_ctx.update("Locating nearby store...")
            store = await find_nearest_store(coordinates[0], coordinates[1], settings=settings)
    return session, store


@app.command()
def analyze(
    image: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, readable=True, help="Prescription photo (JPEG/PNG/...)."
    ),
    sample: bool = typer.Option(False, "--sample", help="Use the sample prescription image."),
    rotate: int = typer.Option(0, "--rotate", help="Clockwise rotation before analysis (0/90/180/270)."),
    lang: Optional[SummaryLanguage] = typer.Option(None, "--lang", help="Summary language."),
    proxy_url: Optional[str] = typer.Option(None, "--proxy-url", help="Analyze through a proxy server."),
    export_json: Optional[Path] = typer.Option(None, "--export-json", help="Write the result as JSON."),
    export_html: Optional[Path] = typer.Option(None, "--export-html", help="Write an HTML report."),
    export_pdf: Optional[Path] = typer.Option(None, "--export-pdf", help="Write a PDF report (HTML fallback)."),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude for the nearest Kendra lookup."),
    lng: Optional[float] = typer.Option(None, "--lng", help="Longitude for the nearest Kendra lookup."),
    quiet: bool = typer.Option(False, "--quiet", help="Skip the banner."),
) -> None:
    """Analyze a prescription photo and show Jan Aushadhi equivalents and savings."""

    settings = AppSettings()
    configure_logging(settings.log_level)

    if image is None and not sample:
        raise typer.BadParameter("pass an IMAGE path or --sample")
    try:
        rotation = normalize_rotation(rotate)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    coordinates = _validate_coordinates(lat, lng)
    language = lang or settings.default_language

    if not quiet:
        print_banner(_console)

    try:
        analyzer = _build_analyzer(settings, proxy_url)
    except ConfigurationError as exc:
        _console.print(build_error_panel(str(exc), title="Configuration"))
        raise typer.Exit(code=1) from exc

    session, store = asyncio.run(
        _run_analysis(
            settings=settings,
            image=image,
            sample=sample,
            rotation=rotation,
            analyzer=analyzer,
            coordinates=coordinates,
        )
    )

    if session.error or session.result is None:
        _console.print(build_error_panel(session.error or "No image to analyze."))
        raise typer.Exit(code=1)

    render_result(_console, session.result, language, store)
    if coordinates and store is None:
        _console.print(f"[yellow]{NO_STORE_MESSAGE}[/yellow]")

    _export(
        session.result,
        language=language,
        store=store,
        export_json=export_json,
        export_html=export_html,
        export_pdf=export_pdf,
    )


@app.command()
def locate(
    lat: float = typer.Option(..., "--lat", help="Latitude."),
    lng: float = typer.Option(..., "--lng", help="Longitude."),
) -> None:
    """Find the nearest Pradhan Mantri Bhartiya Janaushadhi Kendra."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    _validate_coordinates(lat, lng)

    with _console.status("Locating nearby store..."):
        store = asyncio.run(find_nearest_store(lat, lng, settings=settings))

    if store is None:
        _console.print(build_error_panel(NO_STORE_MESSAGE, title="No store found"))
        raise typer.Exit(code=1)
    _console.print(build_store_panel(store))


@app.command()
def speak(
    result_json: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON from --export-json."),
    lang: Optional[SummaryLanguage] = typer.Option(None, "--lang", help="Summary language."),
    out: Path = typer.Option(Path("summary.wav"), "--out", help="WAV output path."),
) -> None:
    """Read the prescription summary aloud (writes a WAV file)."""

    settings = AppSettings()
    configure_logging(settings.log_level)
    language = lang or settings.default_language

    try:
        result = load_result_json(result_json)
    except ValueError as exc:
        raise typer.BadParameter(f"not an exported analysis: {exc}") from exc
    text = select_summary_text(result.bhashini_summary, language)
    if not text:
        _console.print("[yellow]Nothing to read for this prescription.[/yellow]")
        raise typer.Exit(code=1)

    try:
        with _console.status(f"Cloud TTS is generating ({language.label()})..."):
            audio_b64 = asyncio.run(generate_speech(text, settings=settings))
    except AushadhError as exc:
        logging.getLogger(__name__).debug("TTS failed: %s", exc)
        _console.print(build_error_panel("Failed to generate audio. Please try English.", title="Speech"))
        raise typer.Exit(code=1) from exc

    pcm = base64.b64decode(audio_b64)
    path = pcm_to_wav(pcm, out)
    _console.print(f"[green]Audio saved:[/green] {path} ({pcm_duration_seconds(pcm):.1f}s)")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default 3000)."),
) -> None:
    """Run the proxy server (keeps the API key off the client)."""

    settings = AppSettings()
    configure_logging("INFO")
    bind_host = host or settings.server_host
    bind_port = port or settings.server_port
    _console.print(f"[green]Proxy running on[/green] http://{bind_host}:{bind_port}")
    uvicorn.run("server.app:app", host=bind_host, port=bind_port, log_level="info")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
