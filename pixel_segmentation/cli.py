"""
Command-line driver: segment an image file and report cluster quality.

Usage:
    pixel-segment -i photo.png -a kmeans -k 6 -o photo_segmented.png
    pixel-segment -i photo.png -a meanshift --bandwidth 30 --coloring hue
    pixel-segment -i photo.png -c segment.yaml
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import imageio.v3 as iio
import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TimeElapsedColumn
from tabulate import tabulate

from .classes import PixelBuffer
from .config import ALGORITHMS, COLORING_POLICIES, KMEANS_INIT_METHODS, KMEANS_STOPPING_RULES, load_config
from .exceptions import SegmentationError
from .pipeline import run_segmentation

console = Console()
log = logging.getLogger("pixel_segmentation")

NDIM_COLOR = 3
MAX_CHANNELS = 4  # RGBA


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Segment an image by clustering its pixel colors")
    parser.add_argument("--input", "-i", required=True, help="Input image file")
    parser.add_argument("--output", "-o", help="Output image file (default: <input>_<algorithm>.png)")
    parser.add_argument("--config", "-c", default="segment.yaml", help="Configuration file path")
    parser.add_argument("--algorithm", "-a", choices=ALGORITHMS, help="Clustering algorithm")
    parser.add_argument("--clusters", "-k", type=int, help="Number of clusters (kmeans)")
    parser.add_argument("--bandwidth", type=float, help="Kernel radius in RGB units (meanshift)")
    parser.add_argument("--sigma", type=float, help="Seed basin threshold scale (watershed)")
    parser.add_argument("--coloring", choices=COLORING_POLICIES, help="Output colors")
    parser.add_argument("--init", choices=KMEANS_INIT_METHODS, help="Centroid seeding (kmeans)")
    parser.add_argument("--stopping", choices=KMEANS_STOPPING_RULES, help="Stopping rule (kmeans)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--sample-size", type=int, help="Pixels scored by silhouette (default from config)")
    parser.add_argument("--no-metrics", action="store_true", help="Skip the validity metrics")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def merge_args(config: dict, args: argparse.Namespace) -> dict:
    """Command-line flags override the configuration file."""
    overrides = {
        "algorithm": args.algorithm,
        "clusters": args.clusters,
        "bandwidth": args.bandwidth,
        "sigma": args.sigma,
        "coloring": args.coloring,
        "init": args.init,
        "stopping": args.stopping,
        "seed": args.seed,
        "silhouette_sample_size": args.sample_size,
    }
    config.update({key: value for key, value in overrides.items() if value is not None})
    return config


def format_metrics(record_dict: dict) -> str:
    rows = [{"Metric": key, "Value": "undefined" if value is None else value} for key, value in record_dict.items()]
    return tabulate(pd.DataFrame(rows), headers="keys", showindex=False, tablefmt="pretty")


def format_clusters(summaries: list[dict]) -> str:
    df_clusters = pd.DataFrame(
        [
            {
                "Cluster": summary["id"],
                "Pixels": summary["size"],
                "Centroid": "({:.1f}, {:.1f}, {:.1f})".format(*summary["centroid"]),
                "Display": "#{:02x}{:02x}{:02x}".format(*summary["color"]),
            }
            for summary in summaries
        ]
    )
    return tabulate(df_clusters, headers="keys", showindex=False, tablefmt="pretty")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    input_path = Path(args.input)
    if not input_path.exists():
        log.error(f"Input file not found: {input_path}")
        return 1

    try:
        config = merge_args(load_config(args.config), args)
    except SegmentationError as e:
        log.error(f"Invalid configuration: {e}")
        return 1

    algorithm = config["algorithm"]
    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}_{algorithm}.png")

    with Progress(SpinnerColumn(), *Progress.get_default_columns(), TimeElapsedColumn(), console=console) as progress:
        task_load = progress.add_task("[cyan]Loading image...", total=1)
        image = iio.imread(input_path)
        if image.ndim == NDIM_COLOR and image.shape[2] > MAX_CHANNELS:
            image = image[:, :, :MAX_CHANNELS]
        try:
            pixels = PixelBuffer.from_array(image)
        except SegmentationError as e:
            log.error(f"Unsupported image {input_path}: {e}")
            return 1
        progress.update(task_load, advance=1)
        log.info(f"Image size: {pixels.width}x{pixels.height} ({pixels.n_pixels} pixels)")

        task_run = progress.add_task(f"[cyan]Running {algorithm}...", total=1)
        t_start = time.time()
        try:
            result, record = run_segmentation(
                pixels,
                algorithm,
                {key: config[key] for key in ("clusters", "bandwidth", "sigma")},
                coloring=config["coloring"],
                init=config["init"],
                stopping=config["stopping"],
                seed=config["seed"],
                evaluate=not args.no_metrics,
                silhouette_sample_size=config["silhouette_sample_size"],
            )
        except SegmentationError as e:
            log.error(f"Segmentation failed: {e}")
            return 1
        progress.update(task_run, advance=1)
        log.info(f"Segmentation time: {time.time() - t_start:.2f} seconds")

        task_save = progress.add_task("[cyan]Saving result...", total=1)
        iio.imwrite(output_path, result.output.to_image())
        progress.update(task_save, advance=1)

    console.print(f"[bold green]\nClusters ({result.n_clusters})[/bold green]")
    print(format_clusters(result.summarize(pixels, include_images=False)))

    if record is not None:
        console.print("[bold green]\nMetrics[/bold green]")
        print(format_metrics(record.as_dict()))

    log.info(f"[bold green]Saved {output_path}", extra={"markup": True})
    return 0


if __name__ == "__main__":
    sys.exit(main())
