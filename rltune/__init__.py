"""rltune — run specifications and hyperparameter search glue for Ray RLlib / Tune."""

__version__ = "0.1.0"
