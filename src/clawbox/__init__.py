"""clawbox: sandboxed tool-calling agent runner with file-drop IPC to its host."""

__version__ = "0.1.0"
