"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `analyze`, `locate` y `speak`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from core.domain.language import SummaryLanguage
from core.domain.models import DEFAULT_DISCLAIMER, AnalysisResult, SavingsBreakdown, StoreLocation

BRAND_GREEN = "#2E7D32"


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Se omite en modos no interactivos (`--quiet`).
    """

    title = Text("Aushadh-AI", style=f"bold {BRAND_GREEN}")
    subtitle = Text("PMBJP Assistant • Save on medicines with Jan Aushadhi", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style=BRAND_GREEN, padding=(1, 4)))


def build_metadata_panel(result: AnalysisResult) -> Panel:
    table = Table.grid(expand=True)
    table.add_column(ratio=3)
    table.add_column(ratio=1, justify="right")
    table.add_row(Text("Doctor", style="bold green"), Text("Date", style="bold green"))
    table.add_row(Text(result.metadata.doctor), Text(result.metadata.date))
    return Panel(table, border_style="green")


def build_medications_table(result: AnalysisResult) -> Table:
    """Tabla marca -> genérico Jan Aushadhi."""

    table = Table(title="Prescription Analysis", show_lines=True)
    table.add_column("Prescribed Brand", style="bold white")
    table.add_column("Active Salt", style="cyan")
    table.add_column("Jan Aushadhi Generic", style=f"bold {BRAND_GREEN}")
    table.add_column("Brand Est.", justify="right", style="dim")
    table.add_column("Generic Est.", justify="right", style="green")
    table.add_column("You Save", justify="right", style="bold green")
    for med in result.medications:
        # Texto del modelo: nunca interpretarlo como markup de Rich.
        table.add_row(
            *(
                Text(value)
                for value in (
                    med.prescribed_brand,
                    med.active_salt,
                    med.jan_aushadhi_generic,
                    med.brand_price_est,
                    med.jan_aushadhi_price_est,
                    med.savings_est,
                )
            )
        )
    return table


def build_savings_panel(savings: SavingsBreakdown) -> Panel:
    """Widget de ahorro: importes + barra (parte genérica vs. ahorro)."""

    headline = Text.assemble(
        (f"₹{savings.total_savings:.0f}", f"bold {BRAND_GREEN}"),
        "  ",
        (f"Save {savings.savings_percentage}%", "green"),
    )
    prices = Table.grid(padding=(0, 2))
    prices.add_column()
    prices.add_column(justify="right")
    prices.add_row(Text("Market Price", style="dim"), Text(f"₹{savings.total_brand_price:.0f}", style="dim strike"))
    prices.add_row(
        Text("Jan Aushadhi Price", style=f"bold {BRAND_GREEN}"),
        Text(f"₹{savings.total_generic_price:.0f}", style=f"bold {BRAND_GREEN}"),
    )
    completed = min(max(savings.savings_percentage, 0), 100)
    bar = ProgressBar(total=100, completed=completed, width=40, complete_style="green", finished_style="green")
    body = Group(
        Text("Based on PMBJP comparative pricing", style="dim"),
        headline,
        prices,
        bar,
    )
    return Panel(body, title=Text("Estimated Savings", style="bold"), border_style="green")


def build_summary_panel(result: AnalysisResult, language: SummaryLanguage) -> Panel:
    text = result.bhashini_summary.for_language(language)
    return Panel(Text(text), title=Text(f"Summary · {language.label()}", style="bold"), border_style="cyan")


def build_no_medicines_panel() -> Panel:
    body = Text(
        "No medications were found in this scan. Please ensure the prescription text is "
        "clearly visible and not obscured by glare or shadows."
    )
    return Panel(body, title=Text("No medicines detected", style="bold blue"), border_style="blue")


def build_store_panel(store: StoreLocation) -> Panel:
    body = Text()
    body.append(store.name + "\n", style="bold")
    body.append(store.address + "\n\n")
    body.append("Navigate: ", style="dim")
    body.append(store.map_uri, style=f"link {store.map_uri} underline green")
    return Panel(body, title=Text("Nearest Jan Aushadhi Kendra", style="bold green"), border_style="green")


def build_error_panel(message: str, *, title: str = "Analysis Failed") -> Panel:
    return Panel(Text(message), title=Text(title, style="bold red"), border_style="red")


def build_disclaimer(result: AnalysisResult | None = None) -> Text:
    text = result.disclaimer if result else DEFAULT_DISCLAIMER
    return Text.assemble(("⚠ Disclaimer: ", "bold yellow"), (text, "dim"))
