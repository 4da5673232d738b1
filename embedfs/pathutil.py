from __future__ import annotations

import posixpath


def norm_path(p: str) -> str:
    """Normalize an embedded path to its canonical absolute form.

    Rules:
    - Always rooted at '/'
    - Collapse duplicate slashes and drop '.' segments
    - Resolve '..' segments lexically; they never climb above the root
    - Strip trailing slashes
    """
    p = posixpath.normpath("/" + p)
    # normpath keeps a leading '//' as-is
    if p.startswith("//"):
        p = "/" + p.lstrip("/")
    return p
