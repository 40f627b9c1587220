# curvematch/util/fzf.py
"""
Pick GPX files interactively with `fzf`

Candidates are fed as "name<TAB>fullpath" lines; fzf searches and shows only
the name, and the full path comes back in the selected lines.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which
from typing import Iterable, Optional

from curvematch.errors import FzfNotFoundError, SelectionError

# 1: no match, 130: aborted with Esc / Ctrl-C
FZF_OK_CODES = (0, 1, 130)


def build_fzf_cmd(header: str, *, multi: bool = True, preview: Optional[str] = None) -> list[str]:
    cmd = [
        "fzf",
        "--delimiter=\t",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")
    if preview:
        cmd += ["--preview", preview, "--preview-window", "right:60%:wrap"]
    return cmd


def fzf_input(paths: Iterable[Path]) -> bytes:
    return "".join(f"{p.name}\t{p}\n" for p in paths).encode("utf-8")


def parse_fzf_output(stdout: bytes) -> list[Path]:
    """Resolved paths from fzf's selected lines; blank lines are ignored."""
    selected: list[Path] = []
    for line in stdout.decode("utf-8", errors="replace").splitlines():
        if not line.strip():
            continue
        _, _, path_str = line.rpartition("\t")
        selected.append(Path(path_str.strip()).expanduser().resolve())
    return selected


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
        multi: bool = True,
        preview: Optional[str] = None,
) -> list[Path]:
    """
    Let the user pick from `paths` by file name.

    Returns the selected paths, or an empty list if nothing was picked.

    Raises:
      FzfNotFoundError if fzf is not installed.
      SelectionError if fzf exits with an unexpected code.
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    proc = subprocess.run(
        build_fzf_cmd(header, multi=multi, preview=preview),
        input=fzf_input(paths),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    if proc.returncode not in FZF_OK_CODES:
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        raise SelectionError(f"fzf exited with {proc.returncode}: {err}")

    return parse_fzf_output(proc.stdout)
