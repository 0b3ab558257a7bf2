"""Import the overworld of an ALttP-layout ROM into an editable model."""

__version__ = "0.1.0"
