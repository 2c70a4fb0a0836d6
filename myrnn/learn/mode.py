from enum import Enum

class Mode(Enum):
    """
    Execution phase of a model. Layers like DropoutRNNCell only
    regularize in TRAINING.
    """
    TRAINING = "training"
    EVALUATION = "evaluation"
    INFERENCE = "inference"

    @property
    def is_training(self):
        return self is Mode.TRAINING

TRAINING = Mode.TRAINING
EVALUATION = Mode.EVALUATION
INFERENCE = Mode.INFERENCE
