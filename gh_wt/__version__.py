"""Version information for gh-wt."""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("gh-wt")
except PackageNotFoundError:
    # Fallback when running from a source checkout that is not installed
    __version__ = "0.0.0+unknown"
