# stabby: pick a host, get a shell
# License: MIT

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stabby")
except PackageNotFoundError:
    # Source checkout that was never installed
    __version__ = "0.0.0-dev"
