"""
Visualization utilities for SOM models
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

import numpy as np
import structlog

# Set matplotlib backend to Agg (non-interactive) before importing pyplot
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .metrics import ADJACENCY_THRESHOLD  # noqa: E402

if TYPE_CHECKING:
    from .dataset import Dataset
    from .model import Model
    from .trainer import Trainer

logger = structlog.get_logger(__name__)


def ensure_plots_dir(save_path: str) -> str:
    """Ensure plots directory exists and return full path"""
    if not os.path.isabs(save_path):
        plots_dir = Path("plots")
        plots_dir.mkdir(exist_ok=True)
        return str(plots_dir / save_path)
    return save_path


def _finish(show_plot: bool, save_path: Optional[str], what: str) -> Optional[str]:
    full_path = None
    if save_path:
        full_path = ensure_plots_dir(save_path)
        plt.savefig(full_path, dpi=150, bbox_inches="tight")
        logger.info("Plot saved", plot=what, path=full_path)

    if show_plot:
        plt.show()
    else:
        plt.close()
    return full_path


def u_matrix(model: "Model") -> np.ndarray:
    """Mean weight distance of every neuron to its lattice neighbors, (height, width)"""
    weights = model.weight_matrix.view()
    adjacency = model.distance_matrix.view() <= ADJACENCY_THRESHOLD
    np.fill_diagonal(adjacency, False)

    values = np.zeros(model.neuron_count)
    for i in range(model.neuron_count):
        neighbors = np.flatnonzero(adjacency[i])
        if neighbors.size:
            values[i] = np.mean(np.linalg.norm(weights[neighbors] - weights[i], axis=1))
    return values.reshape(model.height, model.width)


class SOMVisualizer:
    """Visualization utilities for SOM analysis"""

    @staticmethod
    def plot_map(
        model: "Model",
        dataset: Optional["Dataset"] = None,
        show_plot: bool = True,
        save_path: Optional[str] = "som_map.png",
        max_samples: int = 2000,
    ):
        """
        Plot neurons in data space (first two dimensions) connected to
        their lattice neighbors, over a scatter of the dataset

        Args:
            model: Model to draw
            dataset: Optional dataset drawn underneath
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
            max_samples: Maximum number of dataset points drawn
        """
        weights = model.weight_matrix.view()
        if model.data_dimension == 1:
            weights = np.column_stack([weights[:, 0], np.zeros(model.neuron_count)])

        plt.figure(figsize=(8, 8))

        if dataset is not None and dataset.sample_count > 0:
            samples = dataset.get_strided_samples(max_samples)
            ys = samples[:, 1] if samples.shape[1] > 1 else np.zeros(len(samples))
            plt.scatter(samples[:, 0], ys, s=2, c="#999999", alpha=0.5, label="Data")

        distances = model.distance_matrix.view()
        for i in range(model.neuron_count):
            for j in range(i):
                if distances[i, j] <= ADJACENCY_THRESHOLD:
                    plt.plot(
                        [weights[i, 0], weights[j, 0]],
                        [weights[i, 1], weights[j, 1]],
                        "r-",
                        linewidth=0.8,
                    )
        plt.scatter(weights[:, 0], weights[:, 1], s=12, c="r", label="Neurons")

        plt.title(f"SOM {model.width}x{model.height} in data space")
        plt.xlabel("Dimension 0")
        plt.ylabel("Dimension 1")
        plt.legend(loc="upper right")
        plt.grid(True, alpha=0.3)

        return _finish(show_plot, save_path, "map")

    @staticmethod
    def plot_weight_grid(
        model: "Model",
        show_plot: bool = True,
        save_path: Optional[str] = "som_weights.png",
    ):
        """
        Show the weights as colored tiles next to the U-matrix

        Args:
            model: Model to draw
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
        """
        weights = model.get_weights_grid()

        if weights.shape[2] >= 3:
            img = weights[:, :, :3]
        else:
            img = np.zeros((model.height, model.width, 3))
            img[:, :, : weights.shape[2]] = weights
            img[:, :, 2] = 0.5
        img = np.clip(img, 0.0, 1.0)

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 6))

        ax1.imshow(img, interpolation="nearest")
        ax1.set_title("Weights (first 3 dimensions as RGB)")
        ax1.axis("off")

        umat = ax2.imshow(u_matrix(model), cmap="gray", interpolation="nearest")
        ax2.set_title("U-matrix")
        ax2.axis("off")
        fig.colorbar(umat, ax=ax2, fraction=0.046)

        return _finish(show_plot, save_path, "weight_grid")

    @staticmethod
    def plot_training_history(
        history: List[Dict],
        show_plot: bool = True,
        save_path: Optional[str] = "training_history.png",
    ):
        """
        Plot QE, TE, learning rate and neighbor size recorded by a
        ``MetricsHistoryCallback``
        """
        if not history:
            logger.warning("No training history available for plotting")
            return None

        iterations = [h["iteration"] for h in history]

        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(12, 8))

        ax1.plot(iterations, [h["qe"] for h in history], "b-", linewidth=2)
        ax1.set_title("Quantization Error")
        ax2.plot(iterations, [h["te"] for h in history], "m-", linewidth=2)
        ax2.set_title("Topographic Error")
        ax3.plot(iterations, [h["learning_rate"] for h in history], "g-", linewidth=2)
        ax3.set_title("Learning Rate")
        ax4.plot(iterations, [h["neighbor_size"] for h in history], "r-", linewidth=2)
        ax4.set_title("Neighbor Size")

        for ax in (ax1, ax2, ax3, ax4):
            ax.set_xlabel("Iteration")
            ax.grid(True, alpha=0.3)

        plt.tight_layout()

        return _finish(show_plot, save_path, "training_history")

    @staticmethod
    def plot_schedule(
        trainer: "Trainer",
        points: int = 100,
        show_plot: bool = True,
        save_path: Optional[str] = "schedule.png",
    ):
        """Plot the learning rate and neighbor size over training progress"""
        preview = trainer.schedule_preview(points)
        progress = [p[0] for p in preview]

        fig, ax1 = plt.subplots(figsize=(8, 5))
        ax2 = ax1.twinx()
        ax1.plot(progress, [p[1] for p in preview], "g-", label="Learning rate")
        ax2.plot(progress, [p[2] for p in preview], "r-", label="Neighbor size")

        ax1.set_xlabel("Progress")
        ax1.set_ylabel("Learning rate", color="g")
        ax2.set_ylabel("Neighbor size", color="r")
        ax1.set_title("Decay schedule")
        ax1.grid(True, alpha=0.3)

        return _finish(show_plot, save_path, "schedule")
