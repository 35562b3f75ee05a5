"""
Callback system for monitoring training
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, TYPE_CHECKING

from tqdm import tqdm

if TYPE_CHECKING:
    from .trainer import Trainer


class Callback(ABC):
    """Abstract base class for callbacks invoked by ``Trainer.iterate``"""

    @abstractmethod
    def on_iterate_begin(self, trainer: "Trainer") -> None:
        pass

    @abstractmethod
    def on_iterate_end(self, trainer: "Trainer", steps: int) -> None:
        pass

    @abstractmethod
    def on_training_finished(self, trainer: "Trainer") -> None:
        pass


class MetricsHistoryCallback(Callback):
    """Records quality metrics and schedule values while training"""

    def __init__(self, interval: int = 100, max_samples: int = 1000):
        if interval < 1:
            raise ValueError(f"interval must be at least 1, got {interval}")
        self.interval = interval
        self.max_samples = max_samples
        self.history: List[Dict] = []
        self._last_recorded: Optional[int] = None

    def on_iterate_begin(self, trainer: "Trainer") -> None:
        # drop entries from before a reset
        self.history = [
            entry
            for entry in self.history
            if entry["iteration"] <= trainer.current_iteration
        ]
        if not self.history:
            self._last_recorded = None
            if trainer.current_iteration == 0:
                self._record(trainer)
        else:
            self._last_recorded = self.history[-1]["iteration"]

    def on_iterate_end(self, trainer: "Trainer", steps: int) -> None:
        if (
            self._last_recorded is None
            or trainer.current_iteration - self._last_recorded >= self.interval
        ):
            self._record(trainer)

    def on_training_finished(self, trainer: "Trainer") -> None:
        if self._last_recorded != trainer.current_iteration:
            self._record(trainer)

    def _record(self, trainer: "Trainer") -> None:
        self.history.append(
            {
                "iteration": trainer.current_iteration,
                "progress": trainer.progress,
                "learning_rate": trainer.learning_rate,
                "neighbor_size": trainer.neighbor_size,
                "qe": trainer.quantization_error(max_samples=self.max_samples),
                "te": trainer.topographic_error(max_samples=self.max_samples),
            }
        )
        self._last_recorded = trainer.current_iteration


class ProgressBarCallback(Callback):
    """Shows a tqdm progress bar over the trainer's schedule"""

    def __init__(self, desc: str = "Training SOM"):
        self.desc = desc
        self.bar: Optional[tqdm] = None

    def on_iterate_begin(self, trainer: "Trainer") -> None:
        if self.bar is None:
            self.bar = tqdm(
                total=trainer.max_iteration,
                initial=trainer.current_iteration,
                desc=self.desc,
            )

    def on_iterate_end(self, trainer: "Trainer", steps: int) -> None:
        self.bar.update(steps)
        self.bar.set_postfix(
            {
                "lr": f"{trainer.learning_rate:.4f}",
                "ns": f"{trainer.neighbor_size:.3f}",
            }
        )

    def on_training_finished(self, trainer: "Trainer") -> None:
        self.close()

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None
