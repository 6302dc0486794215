from __future__ import annotations

import re

KEY_MARKER = "KEY"
UNIQUE_FILL = "XXXX"

_FILL_RUN = re.compile(r"X{4,}")
_MAX_SUFFIX_LENGTH = 255


def validate_template(template: str) -> None:
    if UNIQUE_FILL not in template:
        raise ValueError(
            f"template must contain '{UNIQUE_FILL}' to be filled with a unique string: "
            f"{template!r}"
        )


def validate_suffix(suffix: str) -> None:
    if "\n" in suffix or "\r" in suffix:
        raise ValueError("suffix must not contain line breaks")
    if len(suffix) > _MAX_SUFFIX_LENGTH:
        raise ValueError(f"suffix must be at most {_MAX_SUFFIX_LENGTH} characters")


def substitute_key(template: str, key: object) -> str:
    # Only the first marker is replaced, matching literally and case-sensitively.
    return template.replace(KEY_MARKER, str(key), 1)


def split_template(template: str) -> tuple[str, str]:
    """Split a template around its last run of Xs.

    Returns ``(prefix, infix)``: the text before the run and the text
    after it, the latter belonging in front of any configured suffix.
    """
    runs = list(_FILL_RUN.finditer(template))
    if not runs:
        raise ValueError(f"template has no unique-fill run: {template!r}")
    last = runs[-1]
    return template[: last.start()], template[last.end():]
