"""Directory inference between consecutive keys of a sorted listing."""

import posixpath


def _is_within(path: str, ancestor: str) -> bool:
    return (path + "/").startswith(ancestor + "/")


def directory_diff(prev: str, current: str) -> list[str]:
    """Find the directories of ``current`` not already entered at ``prev``.

    ``prev`` is the last directory reported and ``current`` the next path of
    a sorted listing. The result holds every ancestor of ``current`` that is
    neither ``prev`` nor one of its ancestors, outermost first.

    Examples:
        >>> directory_diff("/path/to/folder", "/path/to/folder/folder/file")
        ['/path/to/folder/folder']
        >>> directory_diff("/path/to/folder/folder1", "/path/to/folder/folder2/file")
        ['/path/to/folder/folder2']
        >>> directory_diff("/path/to/folder/folder1/file", "/path/to/folder/folder2/folder1/file")
        ['/path/to/folder/folder2', '/path/to/folder/folder2/folder1']
        >>> directory_diff("/", "/path/to/folder/folder/file")
        ['/path', '/path/to', '/path/to/folder', '/path/to/folder/folder']
    """
    paths: list[str] = []
    if not prev or not current:
        return paths

    parent = current
    while True:
        next_parent = posixpath.dirname(parent)
        # dirname is a fixed point at "/" (and at "" for relative paths)
        if next_parent == parent:
            break
        parent = next_parent
        if parent in ("/", "") or parent == prev or _is_within(prev, parent):
            break
        paths.append(parent)

    paths.reverse()
    return paths
