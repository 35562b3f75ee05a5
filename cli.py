"""
Command Line Interface for the SOM engine
"""

import argparse
import json
import os
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import structlog

from somengine import (
    __version__,
    ArrayDatasetSource,
    ClusterDatasetSource,
    Dataset,
    DecayingValue,
    InitStrategy,
    LatticeType,
    MetricsHistoryCallback,
    ProgressBarCallback,
    SOMConfig,
    SOMSession,
    schedule_preview,
    setup_logging,
    sphere_source,
    spiral_source,
)

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=False,  # Use console format for CLI
)

logger = structlog.get_logger()


def load_data(file_path: str, format: str = "auto") -> np.ndarray:
    """Load data from various formats"""
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    if format == "auto":
        format = path.suffix.lower()

    try:
        if format in [".csv", "csv"]:
            df = pd.read_csv(file_path)
            return df.select_dtypes(include=[np.number]).values.astype(np.float64)
        elif format in [".json", "json"]:
            with open(file_path, "r") as f:
                data = json.load(f)
            return np.array(data, dtype=np.float64)
        elif format in [".npy", "npy"]:
            return np.load(file_path).astype(np.float64)
        elif format in [".npz", "npz"]:
            loaded = np.load(file_path)
            key = list(loaded.keys())[0]
            return loaded[key].astype(np.float64)
        else:
            raise ValueError(f"Unsupported format: {format}")
    except (OSError, ValueError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load data from {file_path}: {e}") from e


def build_dataset(args) -> Dataset:
    """Build the training dataset from a file or a synthetic generator"""
    if args.input:
        return Dataset([ArrayDatasetSource(load_data(args.input, args.format))])

    if args.shape == "sphere":
        return Dataset([sphere_source(args.samples, seed=args.seed)])
    if args.shape == "spiral":
        return Dataset([spiral_source(args.samples, seed=args.seed)])

    rng = np.random.RandomState(args.seed)
    per_cluster = max(1, args.samples // args.clusters)
    return Dataset(
        [
            ClusterDatasetSource(
                per_cluster,
                rng.random_sample(args.dimension),
                args.stddev,
                seed=None if args.seed is None else args.seed + i,
            )
            for i in range(args.clusters)
        ]
    )


def train_command(args) -> None:
    """Train a SOM"""
    try:
        dataset = build_dataset(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load data", input=args.input, error=str(e))
        print(f"Error loading data: {e}", file=sys.stderr)
        sys.exit(1)

    if dataset.sample_count == 0:
        print("Error: dataset is empty", file=sys.stderr)
        sys.exit(1)

    try:
        config = SOMConfig(
            width=args.width,
            height=args.height,
            data_dimension=dataset.dimension,
            lattice=LatticeType(args.lattice),
            init_strategy=InitStrategy(args.init_strategy),
            max_iteration=args.iterations,
            learning_rate_start=args.learning_rate[0],
            learning_rate_end=args.learning_rate[1],
            neighbor_size_start=args.neighbor_size[0] if args.neighbor_size else None,
            neighbor_size_end=args.neighbor_size[1] if args.neighbor_size else 0.1,
            seed=args.seed,
        )
    except ValueError as e:
        logger.error("Invalid configuration", error=str(e))
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Dataset: {dataset.sample_count} samples, dimension {dataset.dimension}")
    print(
        f"Training SOM: {args.width}x{args.height} {args.lattice} lattice, "
        f"{args.iterations} iterations, {args.init_strategy} initialization"
    )

    session = SOMSession(config, dataset)
    session.initialize()

    history = MetricsHistoryCallback(interval=max(1, args.iterations // 50))
    callbacks = [history]
    if args.verbose:
        callbacks.append(ProgressBarCallback())

    # iterate in chunks so the metrics history gets regular entries
    session.train(callbacks=callbacks, chunk_size=max(1, args.iterations // 100))

    metrics = session.metrics()
    print("Training completed!")
    print(f"Quantization Error: {metrics['qe']:.4f}")
    print(f"Topographic Error: {metrics['te']:.4f}")

    if args.report:
        report = {
            "info": session.get_info(),
            "metrics": metrics,
            "history": history.history,
        }
        with open(args.report, "w") as f:
            json.dump(report, f, indent=2, default=str)
        print(f"Report saved to: {args.report}")

    if args.visualize:
        from somengine.visualization import SOMVisualizer

        SOMVisualizer.plot_map(session.model, dataset, show_plot=False)
        SOMVisualizer.plot_weight_grid(session.model, show_plot=False)
        SOMVisualizer.plot_training_history(history.history, show_plot=False)
        print("Visualizations saved to: plots/")


def schedule_command(args) -> None:
    """Print the decay schedule"""
    try:
        preview = schedule_preview(
            DecayingValue(*args.learning_rate),
            DecayingValue(*args.neighbor_size),
            args.points,
        )
    except ValueError as e:
        print(f"Invalid schedule: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"{'iteration':>10} {'progress':>9} {'learning_rate':>14} {'neighbor_size':>14}")
    for progress, learning_rate, neighbor_size in preview:
        print(
            f"{int(round(progress * args.iterations)):>10} {progress:>9.3f} "
            f"{learning_rate:>14.6f} {neighbor_size:>14.6f}"
        )


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Self-Organizing Map engine CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Train command
    train_parser = subparsers.add_parser("train", help="Train a SOM")
    train_parser.add_argument("input", nargs="?", help="Input data file")
    train_parser.add_argument(
        "--format",
        choices=["auto", "csv", "json", "npy", "npz"],
        default="auto",
        help="Input data format",
    )
    train_parser.add_argument(
        "--shape",
        choices=["clusters", "sphere", "spiral"],
        default="clusters",
        help="Synthetic dataset used when no input file is given",
    )
    train_parser.add_argument(
        "--clusters", type=int, default=6, help="Number of synthetic clusters"
    )
    train_parser.add_argument(
        "--samples", type=int, default=6000, help="Number of synthetic samples"
    )
    train_parser.add_argument(
        "--dimension", type=int, default=3, help="Dimension of synthetic clusters"
    )
    train_parser.add_argument(
        "--stddev", type=float, default=0.05, help="Spread of synthetic clusters"
    )
    train_parser.add_argument("--width", type=int, default=16, help="SOM width")
    train_parser.add_argument("--height", type=int, default=16, help="SOM height")
    train_parser.add_argument(
        "--lattice",
        choices=[t.value for t in LatticeType],
        default="square",
        help="Lattice topology",
    )
    train_parser.add_argument(
        "--init-strategy",
        choices=[s.value for s in InitStrategy],
        default="pca",
        help="Weight initialization strategy",
    )
    train_parser.add_argument(
        "--iterations", type=int, default=10000, help="Number of training iterations"
    )
    train_parser.add_argument(
        "--learning-rate",
        type=float,
        nargs=2,
        metavar=("START", "END"),
        default=[0.1, 0.001],
        help="Learning rate bounds",
    )
    train_parser.add_argument(
        "--neighbor-size",
        type=float,
        nargs=2,
        metavar=("START", "END"),
        help="Neighbor size bounds (start defaults to half the map size)",
    )
    train_parser.add_argument(
        "--seed", type=int, help="Random seed for reproducibility"
    )
    train_parser.add_argument("--report", help="Write a JSON metrics report here")
    train_parser.add_argument(
        "--visualize", action="store_true", help="Save visualizations"
    )
    train_parser.add_argument("--verbose", action="store_true", help="Verbose output")

    # Schedule command
    schedule_parser = subparsers.add_parser(
        "schedule", help="Show the learning rate and neighbor size schedule"
    )
    schedule_parser.add_argument(
        "--iterations", type=int, default=10000, help="Number of training iterations"
    )
    schedule_parser.add_argument(
        "--learning-rate",
        type=float,
        nargs=2,
        metavar=("START", "END"),
        default=[0.1, 0.001],
        help="Learning rate bounds",
    )
    schedule_parser.add_argument(
        "--neighbor-size",
        type=float,
        nargs=2,
        metavar=("START", "END"),
        default=[8.0, 0.1],
        help="Neighbor size bounds",
    )
    schedule_parser.add_argument(
        "--points", type=int, default=11, help="Number of rows to print"
    )

    # Version command
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "train":
        train_command(args)
    elif args.command == "schedule":
        schedule_command(args)
    elif args.command == "version":
        print(f"SOM engine CLI v{__version__}")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
