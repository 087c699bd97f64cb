"""Repository slug helpers.

``GITHUB_REPOSITORY`` carries the repository as an ``owner/name`` slug. It is
an API identifier rather than a path, so it is split here instead of with
``pathlib``.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Join owner and name into the ``owner/name`` slug.

    Examples
    --------
    >>> repo_slug("octo-org", "reef")
    'octo-org/reef'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug into its parts.

    Parameters
    ----------
    slug:
        Value of ``GITHUB_REPOSITORY`` or a payload ``full_name``.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug does not contain exactly one separator with non-empty
        parts on both sides.

    Examples
    --------
    >>> parse_repo_slug("octo-org/reef")
    ('octo-org', 'reef')

    """
    stripped = slug.strip()
    owner, sep, name = stripped.partition("/")
    if not sep or not owner or not name or "/" in name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)
    return owner, name
