# ABOUTME: Comicshelf organizes comic book files into publisher/series folders.
# ABOUTME: Exposes the package version used by the CLI and HTTP User-Agent.

__version__ = "0.1.0"
