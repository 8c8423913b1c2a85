from pysobol.interface.model import ScalarModel

__all__ = ["ScalarModel"]
