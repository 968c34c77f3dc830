"""Second-chance repair for JSON fragments that failed a direct parse."""

from __future__ import annotations


def clean_json_escapes(fragment: str) -> str:
    """Repair line-wrap and double-escape damage inside a JSON fragment.

    - ``\\`` + newline inside a string becomes a ``\\n`` escape (dropped
      outside strings); the continuation line's leading blanks are dropped.
    - ``\\\\"`` (Ansible's double-escaped quote) collapses to ``\\"``.
    - A raw newline inside a string becomes a ``\\n`` escape.

    Any other backslash sequence is left as it is. String state is a plain
    double-quote toggle; the fragment is assumed well formed otherwise.
    """
    out: list[str] = []
    in_string = False
    n = len(fragment)
    i = 0
    while i < n:
        ch = fragment[i]

        if ch == "\\" and i + 1 < n:
            nxt = fragment[i + 1]
            if nxt == "\n":
                if in_string:
                    out.append("\\n")
                i += 2
                while i < n and fragment[i] in " \t":
                    i += 1
                continue
            if nxt == "\\" and i + 2 < n and fragment[i + 2] == '"':
                out.append('\\"')
                i += 3
                continue
            if nxt in ('\\', '"'):
                out.append(ch + nxt)
                i += 2
                continue
            out.append(ch)
            i += 1
            continue

        if ch == '"':
            in_string = not in_string
        elif ch == "\n" and in_string:
            out.append("\\n")
            i += 1
            continue

        out.append(ch)
        i += 1

    return "".join(out)
