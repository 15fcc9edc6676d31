from .dsl import tool, capture, env, seq, sequence
from .gate import check_environment, require_environment
from .runner import run_sequence, run_step, load_sequence
from .model import Step, Capture, RunResult, SequenceResult
from .config import DemoConfig
from .errors import MissingConfiguration, StepFailure

__all__ = [
    "tool", "capture", "env", "seq", "sequence",
    "check_environment", "require_environment",
    "run_sequence", "run_step", "load_sequence",
    "Step", "Capture", "RunResult", "SequenceResult",
    "DemoConfig", "MissingConfiguration", "StepFailure",
]
