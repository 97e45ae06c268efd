from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

from .application import SimulationApplication
from .config import get_results_dir
from .result_builder import ResultBuilder
from .simulation.errors import CollisionModelError


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser used by entry points.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(description="Modello stocastico di rischio di collisione (Band) CLI")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Esegui analisi singolo scenario")
    analyze.add_argument(
        "--no-save",
        action="store_true",
        help="Non salvare i file di output nella cartella results",
    )
    analyze.add_argument(
        "--scenario-file",
        type=str,
        default=None,
        help="Percorso a un file JSON con la definizione dello scenario",
    )
    analyze.add_argument(
        "--n-iter",
        type=int,
        default=None,
        help="Numero di iterazioni Monte Carlo da eseguire",
    )
    analyze.add_argument("--seed", type=int, default=None, help="Seed RNG")
    analyze.add_argument(
        "--options",
        type=str,
        default=None,
        help="Opzioni del modello separate da virgola (es. 1,2,3)",
    )
    analyze.add_argument(
        "--progress",
        action="store_true",
        help="Mostra la barra di avanzamento Monte Carlo",
    )

    batch = sub.add_parser("batch", help="Esegui e confronta più scenari in sequenza")
    batch.add_argument(
        "--scenario-file",
        action="append",
        required=True,
        dest="scenario_files",
        help="File JSON di scenario (ripetibile)",
    )
    batch.add_argument("--name", default="batch", help="Nome del confronto")
    batch.add_argument(
        "--n-iter",
        type=int,
        default=None,
        help="Numero di iterazioni Monte Carlo per scenario",
    )
    batch.add_argument("--seed", type=int, default=None, help="Seed RNG comune a tutti gli scenari")
    batch.add_argument(
        "--options",
        type=str,
        default=None,
        help="Opzioni del modello separate da virgola (es. 1,2,3)",
    )
    batch.add_argument(
        "--no-save",
        action="store_true",
        help="Non salvare i file di output nella cartella results",
    )

    daylight = sub.add_parser("daylight", help="Ore di luce e di buio mensili per una latitudine")
    daylight.add_argument("--latitude", type=float, required=True, help="Latitudine in gradi decimali")

    return parser


def _check_json_file(path: str | Path) -> Path:
    """Fail early with a readable message if a scenario file is missing or not valid JSON."""
    file_path = Path(path)
    if not file_path.exists():
        raise SystemExit(f"File non trovato: {file_path}")
    try:
        json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"File JSON non valido ({file_path}): {exc}") from exc
    return file_path


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _parse_int_list(raw: str | None) -> list[int] | None:
    if raw is None:
        return None
    values = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        values.append(int(token))
    return values


def main(argv: Sequence[str] | None = None) -> None:
    """
    CLI entry point for single analyses, scenario batches and daylight tables.

    Args:
        argv: Optional sequence of CLI args (defaults to sys.argv).
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    if args.command == "daylight":
        try:
            _print_json(SimulationApplication.daylight(args.latitude))
        except ValueError as exc:
            raise SystemExit(f"Latitudine non valida: {exc}") from exc
        return

    save_outputs = not getattr(args, "no_save", False)
    app = SimulationApplication(
        save_outputs=save_outputs,
        result_builder=ResultBuilder(get_results_dir()) if save_outputs else None,
        show_progress=getattr(args, "progress", False),
    )

    try:
        if args.command == "analyze":
            summary = app.run_analysis(
                n_iter=args.n_iter,
                seed=args.seed,
                model_options=_parse_int_list(args.options),
                scenario_data=_check_json_file(args.scenario_file) if args.scenario_file else None,
            )
            _print_json(summary)
            return

        if args.command == "batch":
            summary = app.run_batch(
                scenarios=[_check_json_file(path) for path in args.scenario_files],
                batch_name=args.name,
                n_iter=args.n_iter,
                seed=args.seed,
                model_options=_parse_int_list(args.options),
            )
            _print_json(summary)
            return
    except (CollisionModelError, ValueError, FileNotFoundError) as exc:
        raise SystemExit(f"Errore nella simulazione: {exc}") from exc

    parser.error(f"Comando non riconosciuto: {args.command}")


if __name__ == "__main__":
    main()
