"""VirtualBox control layer: VBoxManage command building, execution and parsing."""

__version__ = "0.1.0"
