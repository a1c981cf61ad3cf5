# tweenr/qt.py
import PySide6
from PySide6 import QtCore, QtGui, QtWidgets

Signal = QtCore.Signal
Slot = QtCore.Slot
Property = QtCore.Property


def binding_versions() -> str:
    """'PySide6 x.y.z / Qt x.y.z' for the startup log."""
    return f"PySide6 {PySide6.__version__} / Qt {QtCore.qVersion()}"


__all__ = ["QtCore", "QtGui", "QtWidgets", "Signal", "Slot", "Property", "binding_versions"]
