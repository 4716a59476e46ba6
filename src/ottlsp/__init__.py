"""ottlsp – Ott Language Server."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version('ottlsp')
except PackageNotFoundError:
    __version__ = '0.0.0.dev0'
