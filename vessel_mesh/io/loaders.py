"""
Fetching of VTK source text.

A source is either a local path or an ``http(s)://`` URL. Any failure to
obtain the text is raised as ``TransportError``; the loader turns that into
a failed ``OperationResult``. There is no retry.
"""

from pathlib import Path
from urllib.error import URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen


class TransportError(RuntimeError):
    """The source text could not be fetched."""


def fetch_vtk_text(source, timeout: float = 30.0) -> str:
    """
    Fetch the raw text of a VTK file.
    
    Parameters
    ----------
    source : str or Path
        Local filename or http(s) URL
    timeout : float
        Network timeout in seconds (URLs only)
    
    Returns
    -------
    str
        File content
    
    Raises
    ------
    TransportError
        If the file is missing, unreadable, or the server answers with a
        non-success status
    """
    source_str = str(source)
    scheme = urlparse(source_str).scheme.lower()
    
    if scheme in ("http", "https"):
        request = Request(source_str, headers={"Accept": "text/plain, */*"})
        try:
            with urlopen(request, timeout=timeout) as response:
                status = getattr(response, "status", 200)
                if status < 200 or status >= 300:
                    raise TransportError(f"HTTP {status} for {source_str}")
                charset = response.headers.get_content_charset() or "utf-8"
                return response.read().decode(charset, errors="replace")
        except URLError as e:
            raise TransportError(f"Failed to fetch {source_str}: {e}") from e
        except OSError as e:
            raise TransportError(f"Failed to fetch {source_str}: {e}") from e
    
    path = Path(source_str)
    if not path.exists():
        raise TransportError(f"VTK file not found: {path}")
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise TransportError(f"Failed to read {path}: {e}") from e
