"""Positional line diff used for golden mismatch reports."""

EQUAL = "= "
GOLDEN = "< "
SILVER = "> "


def render_diff(golden_lines, silver_lines):
    """Render golden and silver context lines side by side.

    Lines are paired by index, not aligned: an inserted line shows up as a run
    of mismatched pairs. Unpaired lines of the longer side follow at the end.
    """
    out = []
    bound = min(len(golden_lines), len(silver_lines))
    for golden, silver in zip(golden_lines[:bound], silver_lines[:bound]):
        if golden == silver:
            out.append(EQUAL + golden + "\n")
        else:
            out.append(GOLDEN + golden + "\n")
            out.append(SILVER + silver + "\n")
    if len(silver_lines) > len(golden_lines):
        out.extend(SILVER + line + "\n" for line in silver_lines[bound:])
    else:
        out.extend(GOLDEN + line + "\n" for line in golden_lines[bound:])
    return "".join(out)
