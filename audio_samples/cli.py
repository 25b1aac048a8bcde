from __future__ import annotations

import argparse
import logging
import os
import time
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.progress import track
from rich.table import Table

from .audio import Audio
from .config import PRESETS, DatasetConfig, load_dataset_config, preset
from .data import generate_dataset, load_dataset, write_dataset
from .logging_utils import DEBUG_ENV, configure_logging, log_exception
from .parameters import DataParameters
from .prepare import DEFAULT_RUN_NAMES, slice_recording

_LOGGER = logging.getLogger("audio_samples.cli")
_CONSOLE = Console()

# (label, preset, chord ids, include effects) rendered by the bench command.
_BENCH_CASES: tuple[tuple[str, str, list[int], bool], ...] = (
    ("all_osc", "single-note", [0], False),
    ("all_osc_chord", "single-note", [5], False),
    ("all_osc_dist", "single-note", [0], True),
    ("all_osc_chord_dist", "single-note", [5], True),
)


def _resolve_config(args: argparse.Namespace) -> DatasetConfig:
    config = load_dataset_config(args.config) if args.config else preset(args.preset)
    updates: dict[str, object] = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.count is not None:
        updates["size"] = args.count
    return config.model_copy(update=updates) if updates else config


def _generate(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    parameters = config.to_parameters()
    datapoints = generate_dataset(parameters, config.size, start=args.start, prefix=args.prefix)
    labels = write_dataset(
        args.output,
        track(datapoints, total=config.size, description="Generating", console=_CONSOLE),
    )
    _CONSOLE.print(f"Wrote {len(labels)} datapoints to {args.output}")
    return 0


def _validate(args: argparse.Namespace) -> int:
    count = 0
    chord_types: dict[int, int] = {}
    for _, _, label in load_dataset(args.directory):
        count += 1
        chord_types[label.chord_type] = chord_types.get(label.chord_type, 0) + 1
    table = Table(title=str(args.directory))
    table.add_column("chord type")
    table.add_column("datapoints", justify="right")
    for chord_id in sorted(chord_types):
        table.add_row(str(chord_id), str(chord_types[chord_id]))
    _CONSOLE.print(table)
    _CONSOLE.print(f"{count} datapoints match their labels")
    return 0


def _prepare(args: argparse.Namespace) -> int:
    recording = Audio.from_wav(args.source)
    datapoints = slice_recording(
        recording,
        start_note=args.start_note,
        end_note=args.end_note,
        run_names=args.run_names,
        note_length=args.note_length,
        data_points_per_note=args.per_note,
        data_point_samples=args.samples,
        rng=np.random.default_rng(args.seed),
    )
    labels = write_dataset(args.output, datapoints)
    _CONSOLE.print(f"Wrote {len(labels)} datapoints to {args.output}")
    return 0


def _lowpass(args: argparse.Namespace) -> int:
    audio = Audio.from_wav(args.source).low_pass(args.cutoff)
    path = audio.to_wav(args.output)
    _CONSOLE.print(f"Wrote low-passed audio to {path}")
    return 0


def _bench_parameters(label: str, chords: list[int], effects: bool) -> DataParameters:
    config = PRESETS[label]
    updates: dict[str, object] = {"chords": chords}
    if not effects:
        updates["effects"] = []
    return config.model_copy(update=updates).to_parameters()


def _bench(args: argparse.Namespace) -> int:
    table = Table(title=f"render time over {args.iterations} iterations")
    table.add_column("case")
    table.add_column("mean ms", justify="right")
    for name, label, chords, effects in _BENCH_CASES:
        point = _bench_parameters(label, chords, effects).generate(0)
        started = time.perf_counter()
        for _ in range(args.iterations):
            point.generate()
        elapsed = (time.perf_counter() - started) / args.iterations
        table.add_row(name, f"{elapsed * 1000:.3f}")
    _CONSOLE.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audio-samples")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Render a labeled synthetic dataset.")
    source = generate.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=sorted(PRESETS), default="single-note")
    source.add_argument("--config", type=Path, help="JSON dataset config.")
    generate.add_argument("--output", type=Path, required=True)
    generate.add_argument("--count", type=int, default=None)
    generate.add_argument("--start", type=int, default=0)
    generate.add_argument("--seed", type=int, default=None)
    generate.add_argument("--prefix", type=str, default="")

    validate = sub.add_parser("validate", help="Check a dataset directory against its labels.")
    validate.add_argument("directory", type=Path)

    prepare = sub.add_parser("prepare", help="Slice a note recording into labeled datapoints.")
    prepare.add_argument("source", type=Path)
    prepare.add_argument("--output", type=Path, required=True)
    prepare.add_argument("--start-note", type=int, default=12)
    prepare.add_argument("--end-note", type=int, default=91)
    prepare.add_argument("--run-names", nargs="+", default=list(DEFAULT_RUN_NAMES))
    prepare.add_argument("--note-length", type=float, default=1.0)
    prepare.add_argument("--per-note", type=int, default=4)
    prepare.add_argument("--samples", type=int, default=256)
    prepare.add_argument("--seed", type=int, default=None)

    lowpass = sub.add_parser("lowpass", help="Apply the spectral low-pass to a WAV file.")
    lowpass.add_argument("source", type=Path)
    lowpass.add_argument("--output", type=Path, required=True)
    lowpass.add_argument("--cutoff", type=float, required=True)

    bench = sub.add_parser("bench", help="Time datapoint rendering.")
    bench.add_argument("--iterations", type=int, default=100)
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        match args.command:
            case "generate":
                return _generate(args)
            case "validate":
                return _validate(args)
            case "prepare":
                return _prepare(args)
            case "lowpass":
                return _lowpass(args)
            case "bench":
                return _bench(args)

        parser.print_help()
        return 1
    except Exception as exc:
        debug = bool(os.environ.get(DEBUG_ENV))
        _LOGGER.warning("audio-samples CLI failed: %s", exc, exc_info=debug)
        log_exception("audio-samples CLI", exc)
        _CONSOLE.print(f"[red]audio-samples failed:[/red] {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
