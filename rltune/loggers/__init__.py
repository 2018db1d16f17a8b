"""Loggers — unified experiment logging interface with WandB and local backends."""

from rltune.loggers.interface import LoggerInterface
from rltune.loggers.local_logger import LocalFileLogger
from rltune.loggers.wandb_logger import WandbLogger

__all__ = ["LoggerInterface", "LocalFileLogger", "WandbLogger"]
