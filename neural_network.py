"""
Neural decision engine for Bugtopia.

Every bug carries a fixed-topology dense network in its NeuralDNA:

  perception (NUM_INPUTS) → hidden layers → decision (NUM_OUTPUTS)

Each layer computes tanh(W · a + b). The eight outputs are decoded into a
Decision: the two movement fields stay in [−1, 1], the six urges are mapped
into [0, 1] with (v + 1) / 2.
"""

from dataclasses import dataclass, asdict

import numpy as np

from config import NUM_OUTPUTS


@dataclass(frozen=True)
class Decision:
    move_x:       float = 0.0
    move_y:       float = 0.0
    aggression:   float = 0.5
    exploration:  float = 0.5
    social:       float = 0.5
    reproduction: float = 0.5
    hunting:      float = 0.5
    fleeing:      float = 0.5

    @classmethod
    def from_outputs(cls, outputs: np.ndarray) -> "Decision":
        if len(outputs) < NUM_OUTPUTS:
            raise ValueError(
                f"need {NUM_OUTPUTS} network outputs, got {len(outputs)}")
        o = [float(v) for v in outputs[:NUM_OUTPUTS]]
        urge = lambda v: (v + 1.0) / 2.0
        return cls(
            move_x=o[0],
            move_y=o[1],
            aggression=urge(o[2]),
            exploration=urge(o[3]),
            social=urge(o[4]),
            reproduction=urge(o[5]),
            hunting=urge(o[6]),
            fleeing=urge(o[7]),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class NeuralNetwork:
    """
    Inference wrapper around a NeuralDNA. Layer matrices are views into the
    genome's read-only arrays, so building one is cheap and forward() never
    changes any state.
    """

    def __init__(self, neural_dna):
        self.topology = neural_dna.topology
        self._layers  = list(neural_dna.layers())

    @property
    def n_inputs(self) -> int:
        return self.topology[0]

    def forward(self, inputs) -> np.ndarray:
        """
        Args:
            inputs: array-like of shape (topology[0],)

        Returns:
            float64 array of shape (topology[-1],), values −1..1
        """
        a = np.asarray(inputs, dtype=np.float64).ravel()
        if a.size != self.n_inputs:
            raise ValueError(
                f"network expects {self.n_inputs} inputs, got {a.size}")
        a = np.where(np.isfinite(a), a, 0.0)
        for W, b in self._layers:
            a = np.tanh(W @ a + b)
        return a

    def decide(self, inputs) -> Decision:
        return Decision.from_outputs(self.forward(inputs))

    def summary(self) -> str:
        lines = [f"NeuralNetwork {' → '.join(str(n) for n in self.topology)}"]
        for i, (W, b) in enumerate(self._layers):
            lines.append(
                f"  L{i}: {W.shape[1]:3d} → {W.shape[0]:3d}"
                f"  |w|={np.abs(W).mean():.3f}  |b|={np.abs(b).mean():.3f}"
            )
        return "\n".join(lines)


def decide(inputs, neural_dna) -> Decision:
    """Run one decision for a genome without keeping a network around."""
    return NeuralNetwork(neural_dna).decide(inputs)
