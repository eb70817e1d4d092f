"""Storage key construction."""


def build_key(file_name: str, target_dir: str | None = None) -> str:
    """Join a target directory and file name into an object key.

    Leading and trailing slashes are stripped from ``target_dir``. A directory
    that is empty after stripping contributes nothing. ``file_name`` is used
    verbatim, inner slashes included.

    Example:
        >>> build_key("f.txt", "/a/b/")
        'a/b/f.txt'
    """
    if not target_dir:
        return file_name

    normalized_dir = target_dir.strip("/")
    if not normalized_dir:
        return file_name
    return f"{normalized_dir}/{file_name}"
