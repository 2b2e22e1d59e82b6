"""Map remote line numbers onto the current local file content.

The server reports lines against the source it analysed.  Local edits
since then shift lines, so each reported line is mapped through a
``difflib`` opcode alignment of the remote and local texts:

* ``equal`` blocks shift by the block offset,
* ``replace`` blocks clamp to the matching local block,
* ``delete`` blocks have no local counterpart (``None``).
"""

from __future__ import annotations

import difflib

from .models import Issue


def build_line_map(
    remote_text: str, local_text: str
) -> dict[int, int | None]:
    """Build a 1-based remote-line to local-line mapping.

    Args:
        remote_text: Source as analysed by the server.
        local_text: Current local file content.

    Returns:
        Dict with one entry per remote line.
    """
    remote_lines = remote_text.splitlines()
    local_lines = local_text.splitlines()
    matcher = difflib.SequenceMatcher(
        None, remote_lines, local_lines, autojunk=False
    )

    mapping: dict[int, int | None] = {}
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "insert":
            continue
        for i in range(i1, i2):
            if tag == "equal":
                mapping[i + 1] = j1 + (i - i1) + 1
            elif tag == "replace":
                mapping[i + 1] = min(j1 + (i - i1), j2 - 1) + 1
            else:
                mapping[i + 1] = None
    return mapping


def correct_lines(
    issues: list[Issue], remote_text: str | None, local_text: str | None
) -> list[Issue]:
    """Return *issues* with lines adjusted to *local_text*.

    Issues are returned unchanged when either text is unknown or the
    texts are identical.  Lines beyond the analysed source are kept.
    """
    if remote_text is None or local_text is None:
        return list(issues)
    if remote_text == local_text:
        return list(issues)

    mapping = build_line_map(remote_text, local_text)
    corrected: list[Issue] = []
    for issue in issues:
        if issue.line is None or issue.line not in mapping:
            corrected.append(issue)
            continue
        corrected.append(issue.model_copy(update={"line": mapping[issue.line]}))
    return corrected
