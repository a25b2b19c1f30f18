"""gigpass - account verification and credential reset service."""

__version__ = "0.1.0"
