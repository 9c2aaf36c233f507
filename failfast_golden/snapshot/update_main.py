#!/usr/bin/env python3
"""Updates golden files from the latest silver outputs."""

import argparse
import os
import shutil
import stat
import sys

GOLDEN_MODE = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH


def main(argv=None):
    parser = argparse.ArgumentParser(description="Copy recorded silver outputs onto golden files.")
    parser.add_argument("silver_dir", help="Directory holding silver outputs.")
    parser.add_argument("golden_dir", help="Directory receiving golden files.")
    args = parser.parse_args(argv)

    workspace = os.environ.get("BUILD_WORKSPACE_DIRECTORY", "")
    silver_dir = _resolve_dir(workspace, args.silver_dir)
    golden_dir = _resolve_dir(workspace, args.golden_dir)

    if not os.path.isdir(silver_dir):
        sys.exit("[golden] silver outputs not available under {}; run the tests first".format(silver_dir))

    copied, failures = copy_golden_outputs(silver_dir, golden_dir)
    if failures:
        sys.exit("Failed to update: {}".format(", ".join(failures)))
    if copied == 0:
        print("[golden] no outputs found under {}".format(silver_dir), file=sys.stderr)
    return 0


def copy_golden_outputs(silver_dir, golden_dir):
    copied = 0
    failures = []
    for root, _, files in os.walk(silver_dir):
        for filename in sorted(files):
            src = os.path.join(root, filename)
            rel = os.path.relpath(src, silver_dir)
            dst = os.path.join(golden_dir, rel)
            try:
                parent = os.path.dirname(dst)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                shutil.copyfile(src, dst)
                _set_golden_mode(dst)
            except OSError as exc:
                print(str(exc), file=sys.stderr)
                failures.append(rel)
                continue
            print("[golden] updated {}".format(rel))
            copied += 1
    return copied, failures


def _resolve_dir(workspace, path):
    if workspace and not os.path.isabs(path):
        return os.path.join(workspace, path)
    return path


def _set_golden_mode(path):
    # Golden files are plain data: 0644 regardless of the silver file.
    os.chmod(path, GOLDEN_MODE)


if __name__ == "__main__":
    sys.exit(main())
